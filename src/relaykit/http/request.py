"""Request descriptors and their encoding into transport requests."""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Union
from urllib.parse import urlencode, urlsplit, urlunsplit

from relaykit.http import DEFAULT_MIME_TYPE, DEFAULT_TIMEOUT, MIN_URL_PATH_LENGTH
from relaykit.http._protocols import CompletionContext
from relaykit.http.errors import SetupInvalidURL
from relaykit.http.methods import Get, HttpMethod, Post, Put, QueryItems
from relaykit.http.serde import encode_payload


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything needed to perform one request.

    Attributes:
        url: Absolute endpoint URL
        method: Method variant, carrying query items or payload
        headers: Headers sent verbatim
        timeout: Seconds before the transport gives up. None means DEFAULT_TIMEOUT
        expected_mime_type: MIME type checked against the response
        completion_context: Where the completion callback runs. None means the worker thread
        log_failures: Send every collected fault to the failure logger
    """

    url: str
    method: HttpMethod = field(default_factory=Get)
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None
    expected_mime_type: str = DEFAULT_MIME_TYPE
    completion_context: Optional[Union[CompletionContext, asyncio.AbstractEventLoop]] = None
    log_failures: bool = False

    def __post_init__(self):
        context = self.completion_context
        if context is not None and not isinstance(context, (CompletionContext, asyncio.AbstractEventLoop)):
            raise TypeError(
                f"completion_context must be an event loop or have a submit method, got {type(context).__name__}"
            )

    @property
    def resolved_timeout(self) -> float:
        return self.timeout if self.timeout is not None else DEFAULT_TIMEOUT


@dataclass(frozen=True)
class TransportRequest:
    url: str
    method: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class TransportResponse:
    """What a transport observed. Every field is optional, an error usually means no status."""

    body: Optional[bytes] = None
    status_code: Optional[int] = None
    mime_type: Optional[str] = None
    error: Optional[BaseException] = None
    headers: Mapping[str, str] = field(default_factory=dict)


def check_url(url: str) -> None:
    """Reject URLs that cannot be parsed or whose path is shorter than MIN_URL_PATH_LENGTH.

    Raises:
        SetupInvalidURL: If the URL is not acceptable
    """
    if not url:
        raise SetupInvalidURL(url, "URL is empty")
    try:
        path = urlsplit(url).path
    except ValueError as e:
        raise SetupInvalidURL(url, f"URL could not be parsed ({e})") from e
    if len(path) < MIN_URL_PATH_LENGTH:
        raise SetupInvalidURL(url, f"URL path must be at least {MIN_URL_PATH_LENGTH} characters")


def encode_request(descriptor: RequestDescriptor) -> TransportRequest:
    """Turn a descriptor into the request handed to the transport.

    Raises:
        SetupInvalidURL: If query items cannot be attached to the URL
    """
    method = descriptor.method
    url = descriptor.url
    body = None
    if isinstance(method, Get):
        url = _with_query_items(url, method.query_items)
    elif isinstance(method, (Put, Post)):
        body = encode_payload(method.payload)

    return TransportRequest(
        url=url,
        method=method.name,
        headers=dict(descriptor.headers),
        body=body,
        timeout=descriptor.resolved_timeout,
    )


def _with_query_items(url: str, query_items: QueryItems) -> str:
    if not query_items:
        return url
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise SetupInvalidURL(url, f"URL could not be parsed ({e})") from e
    if not parts.scheme or not parts.netloc:
        raise SetupInvalidURL(url, "URL must be absolute to carry query items")

    query = urlencode(list(query_items))
    if parts.query:
        query = f"{parts.query}&{query}" if query else parts.query
    return urlunsplit(parts._replace(query=query))


def parse_mime_type(content_type: Optional[str]) -> Optional[str]:
    """Extract the bare MIME type from a Content-Type header value."""
    if not content_type:
        return None
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime or None


def describe(descriptor: RequestDescriptor) -> str:
    """Short "METHOD url" label used in log messages, without query parameters."""
    return f"{descriptor.method.name} {descriptor.url.split('?')[0]}"
