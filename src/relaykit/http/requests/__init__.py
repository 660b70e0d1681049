from relaykit.http.requests.transport import RequestsTransport, create_session

__all__ = ["RequestsTransport", "create_session"]
