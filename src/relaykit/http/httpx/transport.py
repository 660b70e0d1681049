"""Transport backed by an httpx Client."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from relaykit.http import DEFAULT_MAX_CONCURRENT
from relaykit.http._user_agent import get_user_agent
from relaykit.http.request import TransportRequest, TransportResponse, parse_mime_type

logger = logging.getLogger(__name__)


def create_client(
    *,
    max_connections: int = DEFAULT_MAX_CONCURRENT,
    client_name: Optional[str] = None,
    **kwargs,
) -> httpx.Client:
    """Create an httpx Client with connection limits matching the concurrency cap.

    Args:
        max_connections: Upper bound on open connections, normally the manager's max_concurrent
        client_name: Name added to User-Agent header
        **kwargs: Additional arguments passed to httpx.Client (e.g. verify, transport).
    """
    headers = kwargs.pop("headers", {})
    headers.setdefault("User-Agent", get_user_agent(f"python-httpx/{httpx.__version__}", client_name))
    kwargs.setdefault("follow_redirects", True)
    kwargs.setdefault("limits", httpx.Limits(max_connections=max_connections))
    return httpx.Client(headers=headers, **kwargs)


class HttpxTransport:
    """Sends transport requests with a synchronous httpx Client."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        *,
        max_connections: int = DEFAULT_MAX_CONCURRENT,
        client_name: Optional[str] = None,
    ):
        self._owns_client = client is None
        self.client = client or create_client(max_connections=max_connections, client_name=client_name)

    def send(self, request: TransportRequest) -> TransportResponse:
        try:
            resp = self.client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
                timeout=request.timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"httpx failed for {request.method} {request.url}: {e}")
            return TransportResponse(error=e)

        return TransportResponse(
            body=resp.content,
            status_code=resp.status_code,
            mime_type=parse_mime_type(resp.headers.get("Content-Type")),
            headers=dict(resp.headers),
        )

    def close(self) -> None:
        if self._owns_client:
            self.client.close()
