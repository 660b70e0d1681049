"""Protocol definitions for the collaborators of the request pipeline."""

from typing import TYPE_CHECKING, Any, Callable, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from relaykit.http.errors import RequestError
    from relaykit.http.request import TransportRequest, TransportResponse


@runtime_checkable
class Transport(Protocol):
    """Protocol for HTTP transports.

    Network faults, including timeouts, are reported through
    ``TransportResponse.error`` instead of being raised.
    """

    def send(self, request: "TransportRequest") -> "TransportResponse":
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


@runtime_checkable
class CompletionContext(Protocol):
    """Protocol for places completion callbacks can be scheduled on (e.g. concurrent.futures.Executor)."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Any:
        raise NotImplementedError


FailureLogger = Callable[[Sequence["RequestError"]], None]
Decoder = Callable[[bytes, Any], Any]
