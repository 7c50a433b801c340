"""Stateless text and markup helpers shared by the extractors and detail parsers."""
import logging
import re
from urllib.parse import urlsplit

from selectolax.parser import HTMLParser, Node

from .config import MONTH_ABBREVIATIONS
from .errors import ParseError

logger = logging.getLogger(__name__)

_SHORTHAND_MULTIPLIERS = {"K": 1_000, "M": 1_000_000}
_YEAR_RE = re.compile(r"\b(18|19|20|21)\d{2}\b")


def parse_shorthand_count(text: str | None) -> int:
    """
    Parse a compact count like '1.2K', '2.5M' or '12,345'.

    Unparsable input yields 0 rather than an error; counts on the site are
    decorative and a missing one should not fail the page.
    """
    if not text:
        return 0
    cleaned = text.strip().replace(",", "").upper()

    for suffix, mult in _SHORTHAND_MULTIPLIERS.items():
        if cleaned.endswith(suffix):
            try:
                return int(round(float(cleaned[:-1]) * mult))
            except (ValueError, OverflowError):
                return 0

    return int(cleaned) if cleaned.isdigit() else 0


def extract_numeric_text(text: str | None) -> int | None:
    """Keep only the digits of `text` and return them as an integer."""
    if not text:
        return None
    digits = "".join(ch for ch in text if ch.isdigit())
    return int(digits) if digits else None


def month_to_index(month_abbr: str) -> int | None:
    """Convert a month abbreviation ('Jan', 'jan') to 1-12."""
    lowered = month_abbr.strip().lower()
    for idx, abbr in enumerate(MONTH_ABBREVIATIONS, start=1):
        if abbr.lower() == lowered:
            return idx
    return None


def parse_written_date(text: str) -> tuple[int, int, int]:
    """Parse '01 Jan 2025' into (year, month, day)."""
    parts = text.split()
    if len(parts) != 3:
        raise ParseError(f"Invalid written date format: {text!r}")

    day_str, month_str, year_str = parts
    if not day_str.isdigit():
        raise ParseError(f"Invalid day in date: {text!r}")
    month = month_to_index(month_str)
    if month is None:
        raise ParseError(f"Invalid month in date: {text!r}")
    if not year_str.isdigit():
        raise ParseError(f"Invalid year in date: {text!r}")

    day = int(day_str)
    if not 1 <= day <= 31:
        raise ParseError(f"Invalid day in date: {text!r}")
    return int(year_str), month, day


def parse_iso_date(text: str) -> tuple[int, int, int]:
    """Parse '2025-01-31' (optionally followed by 'T...') into (year, month, day)."""
    parts = text.strip().split("T", 1)[0].split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ParseError(f"Invalid ISO date format: {text!r}")
    year, month, day = (int(p) for p in parts)
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        raise ParseError(f"Invalid ISO date format: {text!r}")
    return year, month, day


def parse_rating(text: str | None) -> float | None:
    """
    Parse a rating shown as '4.2', '4.2/5', '8/10' or as star glyphs ('★★★½').

    Ratings are normalised to the 5-star scale.
    """
    if not text:
        return None
    stripped = text.strip()

    if stripped and set(stripped) <= {"★", "½", " "}:
        stars = stripped.count("★") + (0.5 if "½" in stripped else 0.0)
        return stars or None

    cleaned = stripped.replace("★", "").replace("☆", "")
    if "/" in cleaned:
        parts = cleaned.split("/")
        if len(parts) == 2:
            try:
                value, scale = float(parts[0]), float(parts[1])
            except ValueError:
                return None
            if scale <= 0:
                return None
            return round(value / scale * 5.0, 2)
        return None

    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if 0 <= value <= 5.0 else None


def parse_rating_class(node: Node | None) -> float | None:
    """
    Parse a rating from an element with a class like 'rated-8' (4.0 stars).
    """
    if node is None:
        return None
    classes = node.attributes.get("class") or ""
    for cls in classes.split():
        if cls.startswith("rated-"):
            try:
                val = int(cls.replace("rated-", "")) / 2
            except ValueError as exc:
                logger.debug(f"Unexpected rating format in class '{cls}': {exc}")
                return None
            if 0.5 <= val <= 5.0:
                return val
            logger.debug(f"Rating value outside range [0.5-5.0]: {val} from class '{cls}'")
            return None
    return None


def parse_runtime(text: str | None) -> int | None:
    """Parse a runtime like '142 mins', '2h 22m' or '2:22' into minutes."""
    if not text:
        return None
    cleaned = text.strip().lower()

    if "min" in cleaned:
        match = re.search(r"(\d[\d,]*)\s*min", cleaned)
        if match:
            return int(match.group(1).replace(",", ""))
        return extract_numeric_text(cleaned)

    match = re.fullmatch(r"(\d+)\s*h\s*(?:(\d+)\s*m)?", cleaned)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2) or 0)

    match = re.fullmatch(r"(\d+):(\d{1,2})", cleaned)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2))

    return None


def parse_year(text: str | None) -> int | None:
    """First plausible four-digit year in `text`."""
    if not text:
        return None
    match = _YEAR_RE.search(text)
    return int(match.group(0)) if match else None


def clean_text(text: str | None) -> str:
    if not text:
        return ""
    return " ".join(text.split())


def slug_from_href(href: str | None, segment: str = "film") -> str | None:
    """
    Derive an entity slug from a link such as '/film/the-matrix/'.

    The slug is the path component right after the `segment` component, so
    user-scoped links ('/alice/film/the-matrix/1/') and absolute URLs resolve
    too. Returns None when the segment is missing or nothing follows it.
    """
    if not href:
        return None
    try:
        path = urlsplit(href.strip()).path
    except ValueError:
        return None
    parts = [part for part in path.split("/") if part]
    try:
        idx = parts.index(segment)
    except ValueError:
        return None
    if idx + 1 >= len(parts):
        return None
    slug = parts[idx + 1].strip()
    return slug or None


def extract_user_slug(url: str) -> str | None:
    """Extract the username from 'https://letterboxd.com/<username>/...'."""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if not parts.netloc.endswith("letterboxd.com"):
        return None
    path_parts = [part for part in parts.path.split("/") if part]
    return path_parts[0] if path_parts else None


def split_list_url(url: str) -> tuple[str, str] | None:
    """(author, slug) from a list URL such as '/alice/list/best-of/' or its absolute form."""
    try:
        path = urlsplit(url.strip()).path
    except ValueError:
        return None
    parts = [part for part in path.split("/") if part]
    if len(parts) < 3 or parts[1] != "list":
        return None
    return parts[0], parts[2]


def get_meta_content(tree: HTMLParser, property: str | None = None, name: str | None = None) -> str | None:
    """Read the content attribute of a <meta> tag by property or name."""
    if property:
        selector = f"meta[property='{property}']"
    elif name:
        selector = f"meta[name='{name}']"
    else:
        return None
    node = tree.css_first(selector)
    if node is None:
        return None
    return node.attributes.get("content")


def node_text(node: Node | None) -> str | None:
    """Stripped text of a node, or None when the node is absent or empty."""
    if node is None:
        return None
    text = clean_text(node.text())
    return text or None
