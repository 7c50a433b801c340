import importlib
import sys
from pathlib import Path

import pytest

# Ensure the package under test is importable without installation
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from selectolax.parser import HTMLParser  # noqa: E402

from letterboxd_scraper.urls import extract_page_from_url  # noqa: E402


@pytest.fixture
def fresh_config(monkeypatch):
    """
    Reload config after the test sets env vars, and reload it again with the
    original environment once the test is done.
    """
    import letterboxd_scraper.config as config

    def reload():
        return importlib.reload(config)

    yield reload
    monkeypatch.undo()
    importlib.reload(config)


class FakeFetcher:
    """
    Serves canned documents by page number.

    `pages` maps a page number to HTML, or to an exception instance that is
    raised when that page is requested. Missing pages come back empty.
    """

    def __init__(self, pages=None, detail_html=None):
        self.pages = pages or {}
        self.detail_html = detail_html
        self.requested = []

    async def fetch(self, url):
        self.requested.append(url)
        page = extract_page_from_url(url)
        if page is None:
            return HTMLParser(self.detail_html or "<html><body></body></html>")
        content = self.pages.get(page, "<html><body></body></html>")
        if isinstance(content, Exception):
            raise content
        return HTMLParser(content)

    @property
    def requested_pages(self):
        return [extract_page_from_url(url) for url in self.requested]


def grid_page(slugs, numbered=False):
    """A poster grid page with one `li.poster-container` per slug."""
    items = []
    for idx, slug in enumerate(slugs, start=1):
        number = f'<p class="list-number">{idx}</p>' if numbered else ""
        items.append(
            f'<li class="poster-container">'
            f'<div class="film-poster" data-target-link="/film/{slug}/" data-film-release-year="2001">'
            f'<img alt="{slug.replace("-", " ").title()}" src="https://img.example/{slug}.jpg"/>'
            f"</div>{number}</li>"
        )
    return f'<html><body><ul class="poster-list">{"".join(items)}</ul></body></html>'


@pytest.fixture
def fake_fetcher_cls():
    return FakeFetcher


@pytest.fixture
def make_grid_page():
    return grid_page
