"""Transport backed by a requests Session."""

from __future__ import annotations

import logging
from typing import Optional

import requests
from requests import Session
from requests.adapters import HTTPAdapter

from relaykit.http import DEFAULT_MAX_CONCURRENT
from relaykit.http._user_agent import get_user_agent
from relaykit.http.request import TransportRequest, TransportResponse, parse_mime_type

logger = logging.getLogger(__name__)


def _set_session_user_agent(session: Session, client_name: Optional[str] = None):
    """Set the User-Agent header for the session, including the client name if provided."""
    session.headers["User-Agent"] = get_user_agent(f"requests/{requests.__version__}", client_name)


def create_session(
    *,
    pool_maxsize: int = DEFAULT_MAX_CONCURRENT,
    client_name: Optional[str] = None,
) -> Session:
    """Create a requests session for the pipeline.

    - Connection pools sized to the concurrency cap so workers never wait on a connection
    - No retries, a failed attempt is reported as-is
    - User-Agent header

    Args:
        pool_maxsize: Connections kept per host, normally the manager's max_concurrent
        client_name: Name added to User-Agent header

    Returns:
        Configured requests Session
    """
    session = requests.Session()
    _set_session_user_agent(session, client_name)
    adapter = HTTPAdapter(pool_connections=pool_maxsize, pool_maxsize=pool_maxsize, max_retries=0)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class RequestsTransport:
    """Sends transport requests with a requests Session.

    Example:
        transport = RequestsTransport(client_name="MyService")
        response = transport.send(TransportRequest(url="https://example.com/items", method="GET"))
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        *,
        pool_maxsize: int = DEFAULT_MAX_CONCURRENT,
        client_name: Optional[str] = None,
    ):
        self._owns_session = session is None
        self.session = session or create_session(pool_maxsize=pool_maxsize, client_name=client_name)

    def send(self, request: TransportRequest) -> TransportResponse:
        try:
            resp = self.session.request(
                method=request.method,
                url=request.url,
                headers=request.headers,
                data=request.body,
                timeout=request.timeout,
            )
        except requests.RequestException as e:
            logger.debug(f"requests failed for {request.method} {request.url}: {e}")
            return TransportResponse(error=e)

        return TransportResponse(
            body=resp.content,
            status_code=resp.status_code,
            mime_type=parse_mime_type(resp.headers.get("Content-Type")),
            headers=dict(resp.headers),
        )

    def close(self) -> None:
        if self._owns_session:
            self.session.close()
