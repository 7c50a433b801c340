"""
Record extractors.

The site renders the same film differently depending on context, so each
`RenderingShape` gets its own fragment selectors and extractor function.
An extractor maps one fragment to one record or raises ExtractionError when
the title or the link-derived slug is missing; every other field is best
effort and independent of the rest.
"""
import logging
import re
from datetime import date
from enum import Enum
from typing import Callable

from selectolax.parser import HTMLParser, Node

from .config import BASE_URL
from .errors import ExtractionError
from .models import DiaryEntry, FilmEntry, SearchFilm
from .parsing import (
    clean_text,
    extract_numeric_text,
    node_text,
    parse_rating_class,
    parse_year,
    slug_from_href,
)

logger = logging.getLogger(__name__)

_DIARY_DATE_RE = re.compile(r"/for/(\d{4})/(\d{1,2})/(\d{1,2})/?")


class RenderingShape(Enum):
    GRID = "grid"
    LIST = "list"
    SEARCH_RESULT = "search_result"
    DIARY_ROW = "diary_row"


def _attr(node: Node | None, *names: str) -> str | None:
    """First non-empty attribute among `names`."""
    if node is None:
        return None
    for name in names:
        value = node.attributes.get(name)
        if value and value.strip():
            return value.strip()
    return None


def _known(value, known: dict, name: str):
    """Markup wins; the page context only fills in what the markup left unknown."""
    return value if value is not None else known.get(name)


def _film_url(href: str) -> str:
    if href.startswith(("http://", "https://")):
        return href
    return f"{BASE_URL}/{href.lstrip('/')}"


def _require_slug(href: str | None) -> str:
    if not href:
        raise ExtractionError("Film link not found")
    slug = slug_from_href(href, "film")
    if not slug:
        raise ExtractionError(f"Film link without /film/ segment: {href!r}")
    return slug


def _parse_position(node: Node | None) -> int | None:
    text = node_text(node)
    if not text:
        return None
    return extract_numeric_text(text.rstrip("."))


def extract_grid_film(node: Node, **known) -> FilmEntry:
    """Poster grid item (films, watchlist, likes, list pages)."""
    poster = node.css_first(
        "[data-target-link], [data-item-link], [data-film-link], [data-item-slug], [data-film-slug]"
    )
    img = node.css_first("img")

    title = clean_text(_attr(img, "alt")) or clean_text(_attr(poster, "data-item-name", "data-film-name"))
    if not title:
        raise ExtractionError("Film title not found")

    href = _attr(poster, "data-target-link", "data-item-link", "data-film-link")
    if href is None:
        link = node.css_first("a[href]")
        href = _attr(link, "href")
    if href is None:
        # react-component posters sometimes carry only the slug
        bare_slug = _attr(poster, "data-item-slug", "data-film-slug")
        if bare_slug:
            href = f"/film/{bare_slug}/"
    slug = _require_slug(href)

    release_year = _attr(poster, "data-film-release-year")
    if release_year and release_year.isdigit():
        year = int(release_year)
    else:
        year = parse_year(_attr(poster, "data-item-full-display-name", "data-film-name"))

    rating = None
    liked = None
    viewing_data = node.css_first("p.poster-viewingdata")
    if viewing_data is not None:
        rating = parse_rating_class(viewing_data.css_first("span.rating"))
        liked = viewing_data.css_first("span.like") is not None

    return FilmEntry(
        slug=slug,
        title=title,
        url=_film_url(href),
        year=year,
        poster=_attr(img, "src"),
        rating=rating,
        watched=_known(None, known, "watched"),
        liked=_known(liked, known, "liked"),
        in_watchlist=_known(None, known, "in_watchlist"),
        position=_parse_position(node.css_first(".list-number")),
    )


def extract_list_film(node: Node, **known) -> FilmEntry:
    """Vertical film-detail row (filmography and list detail views)."""
    link = node.css_first(".film-title a, h2 a")
    title = node_text(link)
    if not title:
        raise ExtractionError("Film title not found")
    href = _attr(link, "href")
    slug = _require_slug(href)

    year_node = node.css_first(".film-year, small.metadata a, a[href*='/films/year/']")
    year = parse_year(node_text(year_node))

    img = node.css_first(".film-poster img, img")
    director = node_text(node.css_first("a[href*='/director/']"))

    return FilmEntry(
        slug=slug,
        title=title,
        url=_film_url(href),
        year=year,
        poster=_attr(img, "src"),
        rating=parse_rating_class(node.css_first("span.rating")),
        director=director,
        watched=_known(None, known, "watched"),
        liked=_known(None, known, "liked"),
        in_watchlist=_known(None, known, "in_watchlist"),
    )


def extract_search_film(node: Node, **known) -> SearchFilm:
    """One hit on a film search results page."""
    link = node.css_first(".film-title-wrapper a, .film-title a, h2 a")
    title = node_text(link)
    if not title:
        raise ExtractionError("Search result title not found")
    href = _attr(link, "href")
    slug = _require_slug(href)

    year = parse_year(node_text(node.css_first("small.metadata a, .film-year")))
    img = node.css_first(".film-poster img, img")

    directors = tuple(dict.fromkeys(
        text for text in (node_text(a) for a in node.css("a[href*='/director/']")) if text
    ))

    alternative_titles: tuple[str, ...] = ()
    for meta in node.css("p.film-metadata, .film-detail-content p"):
        text = clean_text(meta.text())
        if text.lower().startswith("alternative titles:"):
            raw = text.split(":", 1)[1]
            alternative_titles = tuple(t.strip() for t in raw.split(",") if t.strip())
            break

    return SearchFilm(
        slug=slug,
        title=title,
        url=_film_url(href),
        year=year,
        poster=_attr(img, "src"),
        directors=directors,
        alternative_titles=alternative_titles,
    )


def _diary_date(node: Node) -> date | None:
    day_link = node.css_first("td.td-day a, td.col-daydate a, .diary-day a")
    match = _DIARY_DATE_RE.search(_attr(day_link, "href") or "")
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def extract_diary_row(node: Node, **known) -> DiaryEntry:
    """One row of a member's diary table."""
    link = node.css_first("td.td-film-details h3 a, h3 a, h2.name a, .td-film-details a")
    title = node_text(link)
    if not title:
        raise ExtractionError("Diary film title not found")
    href = _attr(link, "href")
    slug = _require_slug(href)

    like_cell = node.css_first("td.td-like, td.col-like")
    liked = None
    if like_cell is not None:
        liked = like_cell.css_first(".icon-liked, .-liked") is not None

    rewatch_cell = node.css_first("td.td-rewatch, td.col-rewatch")
    rewatch = None
    if rewatch_cell is not None:
        rewatch = "icon-status-off" not in (rewatch_cell.attributes.get("class") or "")

    review_cell = node.css_first("td.td-review, td.col-review")
    has_review = None
    if review_cell is not None:
        has_review = review_cell.css_first("a") is not None

    return DiaryEntry(
        slug=slug,
        title=title,
        url=_film_url(f"/film/{slug}/"),
        watched_on=_diary_date(node),
        year=parse_year(node_text(node.css_first("td.td-released, td.col-releaseyear"))),
        rating=parse_rating_class(node.css_first("span.rating")),
        liked=_known(liked, known, "liked"),
        rewatch=rewatch,
        has_review=has_review,
    )


# Fragment selectors are tried in order; the first one that matches anything wins.
FRAGMENT_SELECTORS: dict[RenderingShape, tuple[str, ...]] = {
    RenderingShape.GRID: ("li.poster-container", "li.griditem"),
    RenderingShape.LIST: ("li.film-detail",),
    RenderingShape.SEARCH_RESULT: ("ul.results > li", "li.film-detail"),
    RenderingShape.DIARY_ROW: ("tr.diary-entry-row",),
}

EXTRACTORS: dict[RenderingShape, Callable[..., object]] = {
    RenderingShape.GRID: extract_grid_film,
    RenderingShape.LIST: extract_list_film,
    RenderingShape.SEARCH_RESULT: extract_search_film,
    RenderingShape.DIARY_ROW: extract_diary_row,
}


def find_fragments(tree: HTMLParser, shape: RenderingShape) -> list[Node]:
    for selector in FRAGMENT_SELECTORS[shape]:
        nodes = tree.css(selector)
        if nodes:
            return nodes
    return []


def extract_page(tree: HTMLParser, shape: RenderingShape, **known) -> list:
    """
    Extract every valid record on a page, in fragment order.

    Fragments that fail extraction are skipped; a page may legitimately
    yield zero records.
    """
    extractor = EXTRACTORS[shape]
    records = []
    fragments = find_fragments(tree, shape)
    for fragment in fragments:
        try:
            records.append(extractor(fragment, **known))
        except ExtractionError as exc:
            logger.debug(f"Skipping {shape.value} fragment: {exc}")
    if len(records) < len(fragments):
        logger.debug(f"Extracted {len(records)}/{len(fragments)} {shape.value} fragments")
    return records
