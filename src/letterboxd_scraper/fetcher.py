import asyncio
import logging

import httpx
from selectolax.parser import HTMLParser

from .config import HTTP_TIMEOUT, MAX_HTTP_RETRIES, SCRAPER_HTTP2, USER_AGENT, BASE_URL
from .errors import ForbiddenError, MalformedPageError, NotFoundError, TransportError

logger = logging.getLogger(__name__)


class PageFetcher:
    """
    Fetches pages and parses them into selectolax documents.

    One instance (and its connection pool) is meant to be shared by every
    scrape in a session. Timeouts are retried with exponential backoff;
    everything else maps straight onto a FetchError subclass.
    """

    def __init__(
        self,
        *,
        timeout: float = HTTP_TIMEOUT,
        max_retries: int = MAX_HTTP_RETRIES,
        http2: bool = SCRAPER_HTTP2,
        transport: httpx.AsyncBaseTransport | None = None,
        backoff: float = 1.0,
    ):
        self.max_retries = max_retries
        self.backoff = backoff
        self.client = httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Referer": BASE_URL},
            follow_redirects=True,
            timeout=timeout,
            http2=http2,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    async def aclose(self) -> None:
        await self.client.aclose()

    async def fetch(self, url: str) -> HTMLParser:
        for attempt in range(self.max_retries):
            try:
                resp = await self.client.get(url)
            except httpx.TimeoutException as exc:
                if attempt < self.max_retries - 1:
                    wait_time = self.backoff * 2 ** attempt
                    logger.warning(
                        f"Timeout on {url}, retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})"
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(f"Max retries exceeded for {url}: {exc}")
                raise TransportError(url, f"timed out after {self.max_retries} attempts") from exc
            except httpx.HTTPError as exc:
                logger.error(f"Request error on {url}: {type(exc).__name__}: {exc}")
                raise TransportError(url, f"{type(exc).__name__}: {exc}") from exc

            return self._parse_response(url, resp)

        raise TransportError(url, "no attempts made")

    @staticmethod
    def _parse_response(url: str, resp: httpx.Response) -> HTMLParser:
        if resp.status_code == 404:
            raise NotFoundError(url, "page not found")
        if resp.status_code in (401, 403):
            raise ForbiddenError(url, "private or forbidden route")
        if resp.status_code != 200:
            logger.error(f"HTTP {resp.status_code} on {url}")
            raise TransportError(url, f"HTTP {resp.status_code}")

        text = resp.text
        if not text.strip():
            raise MalformedPageError(url, "empty body")
        tree = HTMLParser(text)
        if tree.body is None and tree.root is None:
            raise MalformedPageError(url, "unparsable body")
        return tree
