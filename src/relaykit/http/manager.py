"""Admission control for request executors."""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Optional, Set, Type, TypeVar, Union

if TYPE_CHECKING:
    from typing import Self

from relaykit.http import DEFAULT_CONFIG_PATH, DEFAULT_MAX_CONCURRENT
from relaykit.http._protocols import Decoder, FailureLogger, Transport
from relaykit.http.config import load_client_config, make_transport
from relaykit.http.errors import SetupInvalidURL
from relaykit.http.executor import Completion, ExecutorState, RequestExecutor, log_failures
from relaykit.http.request import RequestDescriptor, check_url, describe
from relaykit.http.result import Failure
from relaykit.http.serde import decode_body

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskHandle:
    """Cancellable reference to one admitted request, queued or in flight."""

    def __init__(self, executor: RequestExecutor, manager: RequestManager):
        self._executor = executor
        self._manager = manager
        self._future: Optional[Future] = None

    @property
    def descriptor(self) -> RequestDescriptor:
        return self._executor.descriptor

    @property
    def state(self) -> ExecutorState:
        return self._executor.state

    def cancel(self) -> bool:
        return self._manager.cancel(self)

    def cancelled(self) -> bool:
        return self._executor.cancelled()

    def done(self) -> bool:
        return self._executor.state.terminal

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until a worker is done with this request or it was cancelled before starting.

        Returns:
            True if the worker finished within timeout
        """
        future = self._future
        if future is None:
            return self.done()
        finished, _ = wait([future], timeout=timeout)
        return bool(finished)

    def _cancel(self) -> bool:
        cancelled = self._executor.cancel()
        if self._future is not None:
            self._future.cancel()
        return cancelled

    def __repr__(self) -> str:
        return f"<TaskHandle {describe(self.descriptor)} {self.state.value}>"


class RequestManager:
    """Runs requests on a bounded pool of worker threads.

    At most max_concurrent requests are in flight at once; later submissions wait in FIFO
    order for a free worker. Completions are delivered through the callback passed to submit.

    Example:
        with RequestManager(max_concurrent=2) as manager:
            handle = manager.submit(
                RequestDescriptor("https://api.example.com/v1/items", Get([("page", "1")])),
                lambda result: print(result),
                result_type=list[Item],
            )
    """

    def __init__(
        self,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        *,
        transport: Union[Transport, str, None] = None,
        decoder: Decoder = decode_body,
        failure_logger: FailureLogger = log_failures,
        client_name: Optional[str] = "auto",
    ):
        """Initialize the manager.

        Args:
            max_concurrent: Maximum number of requests running at the same time
            transport: Transport instance, or the name of one ("requests", "httpx") to create.
                Defaults to a requests based transport. Named transports are closed with the manager.
            decoder: Callable turning (body, result_type) into the delivered value
            failure_logger: Receives every collected fault of requests with log_failures set
            client_name: Name added to User-Agent. Use "auto" for class name, None for no name.
        """
        if not isinstance(max_concurrent, int) or isinstance(max_concurrent, bool) or max_concurrent < 1:
            raise ValueError(f"max_concurrent must be a positive integer, got {max_concurrent!r}")
        if client_name == "auto":
            client_name = self.__class__.__name__

        self._owns_transport = transport is None or isinstance(transport, str)
        if self._owns_transport:
            transport = make_transport(transport or "requests", max_concurrent=max_concurrent, client_name=client_name)

        self.max_concurrent = max_concurrent
        self._transport: Transport = transport
        self._decoder = decoder
        self._failure_logger = failure_logger
        self._pool = ThreadPoolExecutor(max_workers=max_concurrent, thread_name_prefix="relaykit-http")
        self._handles: Set[TaskHandle] = set()
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_config(cls, config_path: Union[str, os.PathLike] = "", **kwargs) -> Self:
        """Create a manager from the JSON config file.

        Args:
            config_path: Path to config file. Defaults to ~/.config/relaykit/config.json.
            **kwargs: Additional arguments passed to the constructor (e.g. decoder, client_name).

        Returns:
            Configured RequestManager instance.
        """
        cfg = load_client_config(str(config_path or DEFAULT_CONFIG_PATH))
        kwargs.setdefault("transport", cfg.transport)
        return cls(cfg.max_concurrent, **kwargs)

    @property
    def in_flight(self) -> int:
        """Number of admitted requests that a worker has not finished with yet."""
        with self._lock:
            return len(self._handles)

    def submit(
        self,
        descriptor: RequestDescriptor,
        completion: Completion,
        result_type: Optional[Type[T]] = None,
    ) -> Optional[TaskHandle]:
        """Admit a request.

        Descriptors with an unusable URL are rejected: completion receives SetupInvalidURL
        on the calling thread, nothing is sent and None is returned.

        Args:
            descriptor: The request to perform
            completion: Called once with Success(value) or Failure(error), unless cancelled
            result_type: Type the response body is decoded into. None gives the parsed JSON.

        Returns:
            Handle of the admitted request, or None if it was rejected

        Raises:
            RuntimeError: If the manager is closed
        """
        try:
            check_url(descriptor.url)
        except SetupInvalidURL as e:
            logger.debug(f"Rejected {describe(descriptor)}: {e}")
            completion(Failure(e))
            return None

        executor = RequestExecutor(
            descriptor,
            self._transport,
            completion,
            result_type=result_type,
            decoder=self._decoder,
            failure_logger=self._failure_logger,
        )
        handle = TaskHandle(executor, self)
        with self._lock:
            if self._closed:
                raise RuntimeError("Cannot submit requests to a closed RequestManager")
            handle._future = self._pool.submit(executor.run)
            self._handles.add(handle)
        handle._future.add_done_callback(lambda future: self._release(handle, future))
        return handle

    def cancel(self, handle: TaskHandle) -> bool:
        """Cancel one request. Queued requests never start, running ones never complete.

        Returns:
            True if the request was cancelled by this call
        """
        with self._lock:
            if handle not in self._handles:
                return False
        return handle._cancel()

    def cancel_all(self) -> int:
        """Cancel every queued and running request.

        Returns:
            Number of requests cancelled by this call
        """
        with self._lock:
            handles = list(self._handles)
        cancelled = sum(1 for handle in handles if handle._cancel())
        if cancelled:
            logger.debug(f"Cancelled {cancelled} request(s)")
        return cancelled

    def close(self, wait: bool = True, cancel_pending: bool = False) -> None:
        """Stop accepting requests and release the worker pool.

        Args:
            wait: Block until running requests are finished. Without waiting, a transport
                created by the manager is closed in the background once they are.
            cancel_pending: Cancel queued and running requests first
        """
        with self._lock:
            self._closed = True
        if cancel_pending:
            self.cancel_all()
        self._pool.shutdown(wait=wait)
        if not self._owns_transport:
            return
        if wait:
            self._transport.close()
        else:
            threading.Thread(target=self._close_transport_when_idle, name="relaykit-http-close", daemon=True).start()

    def _close_transport_when_idle(self) -> None:
        self._pool.shutdown(wait=True)
        self._transport.close()

    def _release(self, handle: TaskHandle, future: Future) -> None:
        if not future.cancelled() and future.exception() is not None:
            logger.error(
                f"Worker raised for {describe(handle.descriptor)}, no completion was delivered",
                exc_info=future.exception(),
            )
        with self._lock:
            self._handles.discard(handle)

    def __enter__(self) -> RequestManager:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
