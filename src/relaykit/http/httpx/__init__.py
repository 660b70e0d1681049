from relaykit.http.httpx.transport import HttpxTransport, create_client

__all__ = ["HttpxTransport", "create_client"]
