"""Classified failures delivered to completion callbacks."""

from typing import Optional


class RequestError(Exception):
    """Base class for classified request failures."""


class SetupInvalidURL(RequestError):
    """Raised before any I/O when the request URL is unusable."""

    def __init__(self, url: str, reason: str = "URL is invalid"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url!r}")


class TransportError(RequestError):
    """The transport failed to produce a response (connection, timeout, ...)."""

    def __init__(self, underlying: BaseException):
        self.underlying = underlying
        super().__init__(f"Transport failure: {underlying}")
        self.__cause__ = underlying


class NoResponseData(RequestError):
    def __init__(self):
        super().__init__("Response carried no body")


class BadStatusCode(RequestError):
    def __init__(self, code: int):
        self.code = code
        super().__init__(f"Unexpected status code {code}")


class BadMimeType(RequestError):
    def __init__(self, got: Optional[str], expected: str):
        self.got = got
        self.expected = expected
        super().__init__(f"Rejected MIME type {got!r} (expected_mime_type={expected!r})")


class DecodeFailure(RequestError):
    """The response body could not be decoded into the requested type."""

    def __init__(self, underlying: BaseException):
        self.underlying = underlying
        super().__init__(f"Could not decode response body: {underlying}")
        self.__cause__ = underlying
