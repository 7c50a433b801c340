import httpx
import pytest

from letterboxd_scraper.errors import (
    FetchError,
    FetchErrorKind,
    ForbiddenError,
    MalformedPageError,
    NotFoundError,
    TransportError,
)
from letterboxd_scraper.fetcher import PageFetcher

URL = "https://letterboxd.com/alice/films/page/1/"


def _fetcher(handler, **kwargs):
    return PageFetcher(transport=httpx.MockTransport(handler), backoff=0.0, **kwargs)


@pytest.mark.asyncio
async def test_fetch_parses_ok_response():
    seen = {}

    def handler(request):
        seen["ua"] = request.headers.get("user-agent")
        return httpx.Response(200, text="<html><body><h1>Hi</h1></body></html>")

    async with _fetcher(handler) as fetcher:
        tree = await fetcher.fetch(URL)

    assert tree.css_first("h1").text() == "Hi"
    assert "letterboxd-scraper" in seen["ua"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,error_cls,kind",
    [
        (404, NotFoundError, FetchErrorKind.NOT_FOUND),
        (403, ForbiddenError, FetchErrorKind.FORBIDDEN),
        (401, ForbiddenError, FetchErrorKind.FORBIDDEN),
        (500, TransportError, FetchErrorKind.TRANSPORT),
    ],
)
async def test_fetch_maps_status_codes(status, error_cls, kind):
    async with _fetcher(lambda request: httpx.Response(status, text="nope")) as fetcher:
        with pytest.raises(error_cls) as excinfo:
            await fetcher.fetch(URL)

    assert isinstance(excinfo.value, FetchError)
    assert excinfo.value.kind is kind
    assert excinfo.value.url == URL


@pytest.mark.asyncio
async def test_fetch_empty_body_is_malformed():
    async with _fetcher(lambda request: httpx.Response(200, text="   ")) as fetcher:
        with pytest.raises(MalformedPageError):
            await fetcher.fetch(URL)


@pytest.mark.asyncio
async def test_fetch_retries_timeouts_then_succeeds():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        if calls["n"] == 1:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, text="<html><body>ok</body></html>")

    async with _fetcher(handler, max_retries=3) as fetcher:
        tree = await fetcher.fetch(URL)

    assert calls["n"] == 2
    assert tree.body.text().strip() == "ok"


@pytest.mark.asyncio
async def test_fetch_gives_up_after_max_retries():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        raise httpx.ConnectTimeout("slow", request=request)

    async with _fetcher(handler, max_retries=2) as fetcher:
        with pytest.raises(TransportError) as excinfo:
            await fetcher.fetch(URL)

    assert calls["n"] == 2
    assert "timed out" in str(excinfo.value)


@pytest.mark.asyncio
async def test_fetch_connection_error_is_not_retried():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        raise httpx.ConnectError("refused", request=request)

    async with _fetcher(handler) as fetcher:
        with pytest.raises(TransportError):
            await fetcher.fetch(URL)

    assert calls["n"] == 1
