"""
Pagination engine.

Drives fetch -> extract -> merge over `{base}/page/{n}/` until a stop rule
fires:

1. the page yielded fewer records than a full page of its rendering shape
   (a page whose fragments all failed extraction counts as short);
2. the cumulative number of extracted records reached the safety ceiling;
3. the caller's page budget (`max_pages`) is spent.

Pages are fetched strictly one at a time in increasing order. A fetch error
aborts the run and nothing collected during that run is returned: `collect`
raises, and `load_more` leaves its receiver exactly as it was.
"""
import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from selectolax.parser import HTMLParser

from .collection import KeyedCollection, OrderedCollection, new_collection
from .config import (
    DIARY_PAGE_SIZE,
    GRID_PAGE_SIZE,
    LIST_PAGE_SIZE,
    SAFETY_CEILING,
    SEARCH_PAGE_SIZE,
)
from .errors import ValidationError
from .extractors import RenderingShape, extract_page
from .urls import add_page_to_url

logger = logging.getLogger(__name__)

PAGE_SIZES: dict[RenderingShape, int] = {
    RenderingShape.GRID: GRID_PAGE_SIZE,
    RenderingShape.LIST: LIST_PAGE_SIZE,
    RenderingShape.SEARCH_RESULT: SEARCH_PAGE_SIZE,
    RenderingShape.DIARY_ROW: DIARY_PAGE_SIZE,
}


class StopReason(Enum):
    SHORT_PAGE = "short_page"
    SAFETY_CEILING = "safety_ceiling"
    MAX_PAGES = "max_pages"


@dataclass
class PaginationCursor:
    """State of one multi-page fetch. `page` is the last page fetched (0 = none yet)."""

    base_url: str
    shape: RenderingShape
    ordered: bool = False
    known: dict = field(default_factory=dict)
    page: int = 0
    page_item_count: int = 0
    seen: int = 0
    exhausted: bool = False
    stop_reason: StopReason | None = None

    @property
    def next_page(self) -> int:
        return self.page + 1


@dataclass
class PagedResult:
    collection: KeyedCollection | OrderedCollection
    cursor: PaginationCursor

    @property
    def records(self) -> tuple:
        return self.collection.records

    @property
    def exhausted(self) -> bool:
        return self.cursor.exhausted

    def __len__(self) -> int:
        return len(self.collection)

    def __iter__(self):
        return iter(self.collection)


class Paginator:
    """
    Collects a paginated listing into a collection.

    Args:
        fetcher: object with an async `fetch(url)` returning a parsed document;
            shared across every run of this paginator
        safety_ceiling: stop once this many records have been extracted
        page_sizes: per-shape full-page sizes overriding PAGE_SIZES
        on_page: called with the cursor after each merged page
    """

    def __init__(
        self,
        fetcher,
        *,
        safety_ceiling: int = SAFETY_CEILING,
        page_sizes: dict[RenderingShape, int] | None = None,
        on_page: Callable[[PaginationCursor], None] | None = None,
    ):
        if safety_ceiling < 1:
            raise ValidationError(f"safety_ceiling must be positive, got {safety_ceiling}")
        self.fetcher = fetcher
        self.safety_ceiling = safety_ceiling
        self.page_sizes = {**PAGE_SIZES, **(page_sizes or {})}
        self.on_page = on_page

    def full_page_size(self, shape: RenderingShape) -> int:
        return self.page_sizes[shape]

    async def collect(
        self,
        base_url: str,
        shape: RenderingShape,
        *,
        ordered: bool = False,
        max_pages: int | None = None,
        on_document: Callable[[int, HTMLParser], None] | None = None,
        **known,
    ) -> PagedResult:
        """
        Fetch pages 1..n of `base_url` until a stop rule fires.

        `known` carries flags the page context implies (e.g. watched=True on
        a member's films page) and is handed to the extractor for every page.
        `on_document(page, tree)` sees each fetched document before extraction,
        for callers that also read page-level fields.
        """
        _check_max_pages(max_pages)
        cursor = PaginationCursor(base_url=base_url, shape=shape, ordered=ordered, known=dict(known))
        collection = new_collection(ordered)
        await self._run(cursor, collection, max_pages, on_document)
        return PagedResult(collection=collection, cursor=cursor)

    async def load_more(self, result: PagedResult, max_pages: int) -> PagedResult:
        """
        Fetch up to `max_pages` further pages into `result`, mutating it.

        Continues from the page after the last one fetched. On a fetch error
        `result` is left untouched. Does nothing once the listing is exhausted.
        """
        _check_max_pages(max_pages)
        if result.cursor.exhausted:
            logger.debug(f"{result.cursor.base_url} already exhausted ({result.cursor.stop_reason})")
            return result

        cursor = dataclasses.replace(result.cursor, known=dict(result.cursor.known))
        collection = result.collection.copy()
        await self._run(cursor, collection, max_pages)

        result.collection = collection
        result.cursor = cursor
        return result

    async def _run(
        self,
        cursor: PaginationCursor,
        collection,
        max_pages: int | None,
        on_document: Callable[[int, HTMLParser], None] | None = None,
    ) -> None:
        full_page = self.full_page_size(cursor.shape)
        fetched = 0

        while True:
            page = cursor.next_page
            url = add_page_to_url(cursor.base_url, page)
            tree = await self.fetcher.fetch(url)
            if on_document is not None:
                on_document(page, tree)

            batch = extract_page(tree, cursor.shape, **cursor.known)
            collection.merge(batch)

            cursor.page = page
            cursor.page_item_count = len(batch)
            cursor.seen += len(batch)
            fetched += 1
            logger.debug(f"  Page {page} of {cursor.base_url}: {len(batch)} records ({len(collection)} total)")

            if self.on_page is not None:
                self.on_page(cursor)

            if len(batch) < full_page:
                cursor.stop_reason = StopReason.SHORT_PAGE
                cursor.exhausted = True
            elif cursor.seen >= self.safety_ceiling:
                logger.warning(f"Safety ceiling of {self.safety_ceiling} records reached for {cursor.base_url}")
                cursor.stop_reason = StopReason.SAFETY_CEILING
                cursor.exhausted = True
            elif max_pages is not None and fetched >= max_pages:
                cursor.stop_reason = StopReason.MAX_PAGES
            else:
                continue
            break

        logger.info(
            f"Collected {len(collection)} records from {cursor.base_url} "
            f"(stopped after page {cursor.page}: {cursor.stop_reason.value})"
        )


def _check_max_pages(max_pages: int | None) -> None:
    if max_pages is not None and max_pages < 1:
        raise ValidationError(f"max_pages must be at least 1, got {max_pages}")
