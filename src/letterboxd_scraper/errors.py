"""Exception types raised by the scraper."""
from enum import Enum


class LetterboxdError(Exception):
    pass


class FetchErrorKind(Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    TRANSPORT = "transport"
    MALFORMED = "malformed"


class FetchError(LetterboxdError):
    """
    A page could not be fetched. Fatal to the pagination run that hit it.

    The URL and a short detail string are kept for caller diagnostics.
    """

    kind: FetchErrorKind = FetchErrorKind.TRANSPORT

    def __init__(self, url: str, detail: str = ""):
        self.url = url
        self.detail = detail
        message = f"{self.kind.value} for {url}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class NotFoundError(FetchError):
    kind = FetchErrorKind.NOT_FOUND


class ForbiddenError(FetchError):
    kind = FetchErrorKind.FORBIDDEN


class TransportError(FetchError):
    kind = FetchErrorKind.TRANSPORT


class MalformedPageError(FetchError):
    kind = FetchErrorKind.MALFORMED


class ExtractionError(LetterboxdError):
    """A single fragment is missing a required field. Never fatal to a page."""


class ValidationError(LetterboxdError, ValueError):
    """Caller input rejected before any request is made."""


class ParseError(LetterboxdError, ValueError):
    pass


class UnsupportedError(LetterboxdError, NotImplementedError):
    """The endpoint is valid but no extractor exists for it yet."""
