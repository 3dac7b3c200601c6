"""Exception hierarchy for webfetch.

Every error is terminal for the request that raised it; no partial result is
returned alongside an exception.
"""

from __future__ import annotations


class WebFetchError(Exception):
    """Base class for all errors raised by webfetch."""


class InvalidRequestError(WebFetchError, ValueError):
    """Raised before any I/O when a request cannot be served as given."""


class FetchError(WebFetchError):
    """Raised when a URL cannot be fetched.

    Attributes:
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
    """

    def __init__(self, message: str, url: str = "", status: int = 0) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class FetchTimeoutError(FetchError):
    """The transport did not deliver a full response within the timeout."""


class UnsupportedContentTypeError(FetchError):
    """The response's content type is not one webfetch can extract from."""

    def __init__(self, content_type: str, url: str = "", status: int = 0) -> None:
        super().__init__(f"Unsupported content type: {content_type}", url=url, status=status)
        self.content_type = content_type


class BodyTooLargeError(FetchError):
    """The response body exceeds the configured size limit."""

    def __init__(self, limit: int, url: str = "", status: int = 0) -> None:
        super().__init__(
            f"Response body exceeds maximum size limit of {limit / (1024 * 1024):g} MB",
            url=url,
            status=status,
        )
        self.limit = limit


class ContinuationError(WebFetchError, LookupError):
    """The continuation token is unknown or has expired; re-fetch the URL."""

    def __init__(self, token: str = "") -> None:
        super().__init__("Continuation token expired or invalid.")
        self.token = token
