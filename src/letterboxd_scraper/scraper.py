import logging
from typing import Callable

from .config import BASE_URL, SAFETY_CEILING
from .details import parse_list_comments, parse_list_page, parse_movie_page, parse_user_page
from .errors import UnsupportedError, ValidationError
from .extractors import RenderingShape
from .fetcher import PageFetcher
from .models import ListComment, ListInfo, Movie, UserProfile
from .pagination import PagedResult, PaginationCursor, Paginator
from .parsing import split_list_url
from .urls import (
    build_diary_url,
    build_film_url,
    build_films_url,
    build_list_comments_url,
    build_list_url,
    build_search_url,
    build_user_section_url,
    build_user_url,
    normalize_letterboxd_url,
)
from .validators import (
    is_valid_letterboxd_url,
    validate_diary_date,
    validate_film_slug,
    validate_list_slug,
    validate_rating,
    validate_search_filter,
    validate_username,
)

logger = logging.getLogger(__name__)

# Search filters that have a result extractor; the rest are valid on the site
# but would come back empty.
SUPPORTED_SEARCH_FILTERS = (None, "films")


def _rating_path(rating: float) -> str:
    return f"rated/{int(rating)}" if float(rating).is_integer() else f"rated/{rating}"


def _site_url(url: str) -> str:
    """Absolute form of `url`; ValidationError unless it points at the configured site."""
    absolute = normalize_letterboxd_url(url)
    if not (is_valid_letterboxd_url(absolute) or absolute.startswith(f"{BASE_URL}/")):
        raise ValidationError(f"Not a Letterboxd URL: {url!r}")
    return absolute


def _list_parts(url: str) -> tuple[str, str]:
    parts = split_list_url(url)
    if parts is None:
        raise ValidationError(f"Not a list URL: {url!r}")
    author, slug = parts
    return validate_username(author), validate_list_slug(slug)


class LetterboxdScraper:
    """
    Entry point for scraping Letterboxd.

    Holds a single PageFetcher for the whole session; pass one in to share it
    with other code (it is then left open on exit), otherwise one is created
    and closed with the scraper.

        async with LetterboxdScraper() as lb:
            watchlist = await lb.get_watchlist("alice")
    """

    def __init__(
        self,
        fetcher=None,
        *,
        safety_ceiling: int = SAFETY_CEILING,
        page_sizes: dict[RenderingShape, int] | None = None,
        on_page: Callable[[PaginationCursor], None] | None = None,
    ):
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher if fetcher is not None else PageFetcher()
        self.paginator = Paginator(
            self.fetcher,
            safety_ceiling=safety_ceiling,
            page_sizes=page_sizes,
            on_page=on_page,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    async def close(self) -> None:
        if self._owns_fetcher:
            await self.fetcher.aclose()

    # Single pages

    async def get_user(self, username: str) -> UserProfile:
        username = validate_username(username)
        tree = await self.fetcher.fetch(build_user_url(username))
        return parse_user_page(tree, username)

    async def get_movie(self, slug: str) -> Movie:
        slug = validate_film_slug(slug)
        tree = await self.fetcher.fetch(build_film_url(slug))
        return parse_movie_page(tree, slug)

    # Collections

    async def get_films(
        self,
        username: str,
        *,
        rating: float | None = None,
        not_rated: bool = False,
    ) -> PagedResult:
        """A member's watched films, optionally narrowed to one rating or to unrated films."""
        username = validate_username(username)
        film_filter = None
        if rating is not None:
            film_filter = _rating_path(validate_rating(rating))
        elif not_rated:
            film_filter = "not-rated"

        logger.info(f"Scraping {username}'s films...")
        return await self.paginator.collect(
            build_films_url(username, film_filter),
            RenderingShape.GRID,
            watched=True,
        )

    async def get_watchlist(self, username: str) -> PagedResult:
        username = validate_username(username)
        logger.info(f"Scraping {username}'s watchlist...")
        return await self.paginator.collect(
            build_user_section_url(username, "watchlist"),
            RenderingShape.GRID,
            in_watchlist=True,
        )

    async def get_liked_films(self, username: str) -> PagedResult:
        username = validate_username(username)
        logger.info(f"Scraping {username}'s liked films...")
        return await self.paginator.collect(
            build_user_section_url(username, "likes/films"),
            RenderingShape.GRID,
            liked=True,
        )

    async def get_films_from_url(self, url: str, shape: RenderingShape = RenderingShape.GRID) -> PagedResult:
        """Any film listing (genre, filmography, year) rendered in `shape`."""
        return await self.paginator.collect(_site_url(url), shape)

    async def get_diary(
        self,
        username: str,
        year: int | None = None,
        month: int | None = None,
        day: int | None = None,
    ) -> PagedResult:
        username = validate_username(username)
        year, month, day = validate_diary_date(year, month, day)
        logger.info(f"Scraping {username}'s diary...")
        return await self.paginator.collect(
            build_diary_url(username, year, month, day),
            RenderingShape.DIARY_ROW,
            ordered=True,
        )

    async def get_list(self, author: str, slug: str) -> tuple[ListInfo, PagedResult]:
        """List header plus every film on it, in list order."""
        author = validate_username(author)
        slug = validate_list_slug(slug)
        url = build_list_url(author, slug)

        first_page = []

        def keep_header(page, tree):
            if page == 1:
                first_page.append(tree)

        films = await self.paginator.collect(url, RenderingShape.GRID, ordered=True, on_document=keep_header)
        return parse_list_page(first_page[0], author, slug), films

    async def get_list_from_url(self, url: str) -> tuple[ListInfo, PagedResult]:
        """`get_list` for a list URL such as https://letterboxd.com/alice/list/best-of/."""
        author, slug = _list_parts(_site_url(url))
        return await self.get_list(author, slug)

    async def get_list_comments(self, author: str, slug: str) -> list[ListComment]:
        author = validate_username(author)
        slug = validate_list_slug(slug)
        tree = await self.fetcher.fetch(build_list_comments_url(author, slug))
        return parse_list_comments(tree)

    async def search(
        self,
        query: str,
        search_filter: str | None = None,
        max_pages: int = 1,
    ) -> PagedResult:
        """
        Film search. Only the first `max_pages` pages are fetched; use
        `load_more` to continue.
        """
        search_filter = validate_search_filter(search_filter)
        if search_filter not in SUPPORTED_SEARCH_FILTERS:
            raise UnsupportedError(f"No result extractor for search filter {search_filter!r}")
        query = query.strip()
        if not query:
            raise ValidationError("Empty search query")

        return await self.paginator.collect(
            build_search_url(query, search_filter),
            RenderingShape.SEARCH_RESULT,
            ordered=True,
            max_pages=max_pages,
        )

    async def load_more(self, result: PagedResult, max_pages: int) -> PagedResult:
        """Fetch up to `max_pages` more pages into `result` (mutates it)."""
        return await self.paginator.load_more(result, max_pages)
