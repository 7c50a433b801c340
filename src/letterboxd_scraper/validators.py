"""
Input validation.

The `is_valid_*` predicates answer yes/no; the `validate_*` wrappers raise
ValidationError and are called before any request goes out.
"""
import re
from datetime import date

from .config import EARLIEST_FILM_YEAR, GENRES, SEARCH_FILTERS, VALID_RATINGS
from .errors import ValidationError


_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")
_SLUG_RE = re.compile(r"^[a-z0-9-]+$")
_LETTERBOXD_URL_RE = re.compile(r"^https?://(www\.)?letterboxd\.com/.+$")
_DANGEROUS_PATTERNS = (
    "<script", "</script>", "javascript:", "onload=", "onerror=",
    "<iframe", "</iframe>", "<embed", "</embed>", "<object", "</object>",
)


def is_valid_username(username: str) -> bool:
    return bool(username) and len(username) <= 50 and bool(_USERNAME_RE.match(username))


def is_valid_film_slug(slug: str) -> bool:
    return bool(slug) and len(slug) <= 200 and bool(_SLUG_RE.match(slug))


def is_valid_list_slug(slug: str) -> bool:
    return bool(slug) and len(slug) <= 100 and bool(_SLUG_RE.match(slug))


def is_valid_rating(rating: float) -> bool:
    return rating in VALID_RATINGS


def is_valid_genre(genre: str) -> bool:
    return genre.lower() in GENRES


def is_valid_search_filter(search_filter: str) -> bool:
    return search_filter in SEARCH_FILTERS


def is_valid_year(year: int) -> bool:
    return EARLIEST_FILM_YEAR <= year <= date.today().year + 5


def is_valid_month(month: int) -> bool:
    return 1 <= month <= 12


def is_valid_day(day: int) -> bool:
    return 1 <= day <= 31


def is_valid_letterboxd_url(url: str) -> bool:
    return bool(_LETTERBOXD_URL_RE.match(url))


def is_safe_text(text: str) -> bool:
    """False when the text carries obvious HTML/script injection."""
    lowered = text.lower()
    return not any(pattern in lowered for pattern in _DANGEROUS_PATTERNS)


def validate_username(username: str) -> str:
    """Return the lowercased username or raise ValidationError."""
    cleaned = (username or "").strip()
    if not is_valid_username(cleaned):
        raise ValidationError(f"Invalid username: {username!r}")
    return cleaned.lower()


def validate_film_slug(slug: str) -> str:
    cleaned = (slug or "").strip().lower()
    if not is_valid_film_slug(cleaned):
        raise ValidationError(f"Invalid film slug: {slug!r}")
    return cleaned


def validate_list_slug(slug: str) -> str:
    cleaned = (slug or "").strip().lower()
    if not is_valid_list_slug(cleaned):
        raise ValidationError(f"Invalid list slug: {slug!r}")
    return cleaned


def validate_rating(rating: float) -> float:
    if not is_valid_rating(rating):
        raise ValidationError(f"Invalid rating: {rating} (expected 0.5-5.0 in 0.5 steps)")
    return rating


def validate_search_filter(search_filter: str | None) -> str | None:
    if search_filter is None:
        return None
    if not is_valid_search_filter(search_filter):
        raise ValidationError(f"Invalid search filter: {search_filter!r}")
    return search_filter


def validate_diary_date(
    year: int | None,
    month: int | None = None,
    day: int | None = None,
) -> tuple[int | None, int | None, int | None]:
    """Check a diary date filter; a month needs a year and a day needs a month."""
    if month is not None and year is None:
        raise ValidationError("Diary month filter requires a year")
    if day is not None and month is None:
        raise ValidationError("Diary day filter requires a month")
    if year is not None and not is_valid_year(year):
        raise ValidationError(f"Invalid year: {year}")
    if month is not None and not is_valid_month(month):
        raise ValidationError(f"Invalid month: {month}")
    if day is not None and not is_valid_day(day):
        raise ValidationError(f"Invalid day: {day}")
    return year, month, day


def sanitize_for_url(text: str) -> str:
    """
    Turn free text into a URL-safe slug: 'Spider-Man: No Way Home' ->
    'spider-man-no-way-home'.
    """
    dashed = "".join(ch if ch.isalnum() else "-" for ch in text.lower())
    return re.sub(r"-{2,}", "-", dashed).strip("-")


def normalize_rating(rating: float) -> float | None:
    """Round to the nearest half star; None when out of range."""
    if rating < 0 or rating > 5.0:
        return None
    rounded = round(rating * 2) / 2
    return rounded if is_valid_rating(rounded) else None


def clean_and_validate_text(text: str, max_length: int) -> str | None:
    cleaned = text.strip()
    if not cleaned or len(cleaned) > max_length:
        return None
    return " ".join(cleaned.split())
