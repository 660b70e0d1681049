"""Executes one admitted request: transport call, validation, decoding and completion delivery."""

import asyncio
import enum
import logging
import threading
from typing import Any, Callable, Generic, List, Optional, Sequence, Type, TypeVar

from relaykit.http import SUCCESS_STATUS_CODES
from relaykit.http._protocols import Decoder, FailureLogger, Transport
from relaykit.http.errors import (
    BadMimeType,
    BadStatusCode,
    DecodeFailure,
    NoResponseData,
    RequestError,
    SetupInvalidURL,
    TransportError,
)
from relaykit.http.request import RequestDescriptor, TransportRequest, TransportResponse, describe, encode_request
from relaykit.http.result import Failure, Result, Success
from relaykit.http.serde import decode_body

logger = logging.getLogger(__name__)

T = TypeVar("T")

Completion = Callable[[Result], None]


class ExecutorState(enum.Enum):
    CREATED = "created"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in (ExecutorState.SUCCEEDED, ExecutorState.FAILED, ExecutorState.CANCELLED)


def log_failures(faults: Sequence[RequestError]) -> None:
    """Default failure logger, one warning per collected fault."""
    for fault in faults:
        logger.warning(f"Request failure {type(fault).__name__}: {fault}")


def classify_response(response: TransportResponse, expected_mime_type: str) -> List[RequestError]:
    """Collect every fault observed in a transport response, in priority order.

    The first fault decides the failure delivered to the caller, the rest are only logged.
    The MIME check records a fault when the response MIME type equals expected_mime_type.
    """
    faults: List[RequestError] = []
    if response.error is not None:
        faults.append(TransportError(response.error))
    if response.status_code is not None and response.status_code not in SUCCESS_STATUS_CODES:
        faults.append(BadStatusCode(response.status_code))
    if response.mime_type is not None and response.mime_type == expected_mime_type:
        faults.append(BadMimeType(response.mime_type, expected_mime_type))
    if response.body is None:
        faults.append(NoResponseData())
    return faults


class RequestExecutor(Generic[T]):
    """Owns a single request from admission to completion.

    States move CREATED -> RUNNING -> SUCCEEDED | FAILED | CANCELLED, or straight from
    CREATED to CANCELLED. The completion callback is invoked exactly once for executors
    ending in SUCCEEDED or FAILED, and never for cancelled ones.
    """

    def __init__(
        self,
        descriptor: RequestDescriptor,
        transport: Transport,
        completion: Completion,
        *,
        result_type: Optional[Type[T]] = None,
        decoder: Decoder = decode_body,
        failure_logger: FailureLogger = log_failures,
    ):
        self.descriptor = descriptor
        self._transport = transport
        self._completion = completion
        self._result_type = result_type
        self._decoder = decoder
        self._failure_logger = failure_logger
        self._state = ExecutorState.CREATED
        self._lock = threading.Lock()

    @property
    def state(self) -> ExecutorState:
        return self._state

    def cancelled(self) -> bool:
        return self._state is ExecutorState.CANCELLED

    def cancel(self) -> bool:
        """Cancel the request unless it already finished.

        Returns:
            True if this call cancelled the executor
        """
        with self._lock:
            if self._state.terminal:
                return False
            self._state = ExecutorState.CANCELLED
        logger.debug(f"Cancelled {describe(self.descriptor)}")
        return True

    def run(self) -> None:
        with self._lock:
            if self._state is not ExecutorState.CREATED:
                return
            self._state = ExecutorState.RUNNING
        logger.debug(f"Running {describe(self.descriptor)}")

        try:
            request = encode_request(self.descriptor)
        except SetupInvalidURL as e:
            self._finish(Failure(e), faults=[e])
            return

        response = self._send(request)
        if self.cancelled():
            logger.debug(f"Dropping response for cancelled {describe(self.descriptor)}")
            return

        faults = classify_response(response, self.descriptor.expected_mime_type)
        if faults:
            self._finish(Failure(faults[0]), faults=faults)
            return

        try:
            value = self._decoder(response.body, self._result_type)
        except Exception as e:
            self._finish(Failure(DecodeFailure(e)))
            return
        self._finish(Success(value))

    def _send(self, request: TransportRequest) -> TransportResponse:
        try:
            return self._transport.send(request)
        except Exception as e:
            logger.debug(f"Transport raised for {describe(self.descriptor)}", exc_info=True)
            return TransportResponse(error=e)

    def _finish(self, result: Result, faults: Sequence[RequestError] = ()) -> None:
        with self._lock:
            if self._state is not ExecutorState.RUNNING:
                return
            self._state = ExecutorState.SUCCEEDED if result.ok else ExecutorState.FAILED
        logger.debug(f"{describe(self.descriptor)} finished as {self._state.value}")

        if faults and self.descriptor.log_failures:
            self._log_faults(faults)
        self._dispatch(result)

    def _log_faults(self, faults: Sequence[RequestError]) -> None:
        try:
            self._failure_logger(faults)
        except Exception:
            logger.exception(f"Failure logger raised while reporting faults for {describe(self.descriptor)}")

    def _dispatch(self, result: Result) -> None:
        context: Any = self.descriptor.completion_context
        if context is None:
            self._deliver(result)
            return
        try:
            if isinstance(context, asyncio.AbstractEventLoop):
                context.call_soon_threadsafe(self._deliver, result)
            else:
                context.submit(self._deliver, result)
        except RuntimeError:
            logger.exception(f"Could not schedule completion for {describe(self.descriptor)} on {context!r}")

    def _deliver(self, result: Result) -> None:
        try:
            self._completion(result)
        except Exception:
            logger.exception(f"Completion callback raised for {describe(self.descriptor)}")
