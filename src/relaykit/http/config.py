import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from relaykit.http import DEFAULT_CONFIG_PATH, DEFAULT_MAX_CONCURRENT, DEFAULT_MIME_TYPE
from relaykit.http._protocols import Transport

TRANSPORTS = ("requests", "httpx")


@dataclass
class ClientConfig:
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    transport: str = "requests"
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None
    log_failures: bool = False
    expected_mime_type: str = DEFAULT_MIME_TYPE


def load_client_config(path: str = DEFAULT_CONFIG_PATH) -> ClientConfig:
    """Load config from JSON file. Returns default ClientConfig if file doesn't exist."""
    expanded = Path(path).expanduser()
    if not expanded.exists():
        return ClientConfig()

    data = json.loads(expanded.read_text())

    max_concurrent = data.get("max_concurrent", DEFAULT_MAX_CONCURRENT)
    if not isinstance(max_concurrent, int) or isinstance(max_concurrent, bool) or max_concurrent < 1:
        raise ValueError(f"max_concurrent must be a positive integer, got {max_concurrent!r} in {path}")

    transport = data.get("transport", "requests")
    if transport not in TRANSPORTS:
        raise ValueError(f"Unknown transport: {transport}. Expected one of: {', '.join(TRANSPORTS)}")

    timeout = data.get("timeout")
    return ClientConfig(
        max_concurrent=max_concurrent,
        transport=transport,
        headers={str(k): str(v) for k, v in data.get("headers", {}).items()},
        timeout=float(timeout) if timeout is not None else None,
        log_failures=bool(data.get("log_failures", False)),
        expected_mime_type=data.get("expected_mime_type", DEFAULT_MIME_TYPE),
    )


def make_transport(
    name: str, *, max_concurrent: int = DEFAULT_MAX_CONCURRENT, client_name: Optional[str] = None
) -> Transport:
    """Build the named transport with connection pools sized for max_concurrent workers."""
    if name == "requests":
        from relaykit.http.requests import RequestsTransport

        return RequestsTransport(pool_maxsize=max_concurrent, client_name=client_name)
    if name == "httpx":
        from relaykit.http.httpx import HttpxTransport

        return HttpxTransport(max_connections=max_concurrent, client_name=client_name)
    raise ValueError(f"Unknown transport: {name}. Expected one of: {', '.join(TRANSPORTS)}")
