import logging
from importlib.metadata import PackageNotFoundError, version
from logging import NullHandler
from pathlib import Path

logging.getLogger(__name__).addHandler(NullHandler())

try:
    __version__ = version("relaykit-http")
except PackageNotFoundError:
    __version__ = "0.0.0"

DEFAULT_TIMEOUT = 15.0
DEFAULT_MAX_CONCURRENT = 5
MIN_URL_PATH_LENGTH = 5
SUCCESS_STATUS_CODES = range(200, 300)
DEFAULT_MIME_TYPE = "application/json"

DEFAULT_CONFIG_PATH = str(Path("~") / ".config" / "relaykit" / "config.json")

from relaykit.http.errors import (  # noqa: E402
    BadMimeType,
    BadStatusCode,
    DecodeFailure,
    NoResponseData,
    RequestError,
    SetupInvalidURL,
    TransportError,
)
from relaykit.http.executor import ExecutorState, RequestExecutor  # noqa: E402
from relaykit.http.manager import RequestManager, TaskHandle  # noqa: E402
from relaykit.http.methods import Delete, Get, Head, HttpMethod, Post, Put  # noqa: E402
from relaykit.http.request import RequestDescriptor, TransportRequest, TransportResponse, encode_request  # noqa: E402
from relaykit.http.result import Failure, Result, Success  # noqa: E402

__all__ = [
    "BadMimeType",
    "BadStatusCode",
    "DecodeFailure",
    "Delete",
    "ExecutorState",
    "Failure",
    "Get",
    "Head",
    "HttpMethod",
    "NoResponseData",
    "Post",
    "Put",
    "RequestDescriptor",
    "RequestError",
    "RequestExecutor",
    "RequestManager",
    "Result",
    "SetupInvalidURL",
    "Success",
    "TaskHandle",
    "TransportError",
    "TransportRequest",
    "TransportResponse",
    "encode_request",
]
