"""Serialization and deserialization utilities for HTTP request/response bodies."""

import json
import logging
from typing import Any, Optional, Type

from pydantic import BaseModel, TypeAdapter

logger = logging.getLogger(__name__)


def serialize_body(body: Any) -> Any:
    """Serialize request body to JSON-compatible format.

    Supports:
    - None, dict, list, primitives (passed through)
    - Pydantic v2 models and objects with to_json() or to_dict() (duck typing)
    - Nested objects inside containers are recursively serialized

    Raises:
        ValueError: If body is str or bytes at top level (not supported as request body)
        TypeError: If body type is not supported
    """
    if body is None:
        return None
    if isinstance(body, (str, bytes)):
        raise ValueError("str and bytes data is not supported")
    return _serialize_value(body)


def _serialize_value(value: Any) -> Any:
    """Recursively serialize a value (used internally for container contents)."""
    if value is None:
        return None
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, bytes):
        raise ValueError("bytes data is not supported")
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]
    if hasattr(value, "model_dump") and callable(value.model_dump):  # Pydantic v2
        return _serialize_value(value.model_dump(mode="json"))
    if hasattr(value, "to_json") and callable(value.to_json):
        return _serialize_value(value.to_json())
    if hasattr(value, "to_dict") and callable(value.to_dict):
        return _serialize_value(value.to_dict())
    raise TypeError(
        f"Cannot serialize value of type {type(value).__name__}. Expected dict, list, primitive, or Serializable."
    )


def encode_payload(payload: Any) -> Optional[bytes]:
    """Return the JSON wire encoding of a PUT/POST payload, or None if it has none.

    Payloads that cannot be serialized produce no body rather than an error.
    """
    if payload is None:
        return None
    try:
        return json.dumps(serialize_body(payload)).encode("utf-8")
    except (TypeError, ValueError) as e:
        logger.debug(f"Payload of type {type(payload).__name__} is not serializable, sending no body: {e}")
        return None


def decode_body(data: bytes, cls: Optional[Type] = None) -> Any:
    """Decode a response body into the requested type.

    Args:
        data: Raw response body
        cls: Target type. None returns the parsed JSON as-is, bytes returns the raw body
            and str the UTF-8 text. Classes with a from_dict() class method are built from
            the parsed JSON, everything else is validated by pydantic (models, dataclasses,
            typed containers such as list[int]).

    Raises:
        ValueError: If the body is not valid JSON or does not match cls
    """
    if cls is None:
        return json.loads(data)
    if cls is bytes:
        return bytes(data)
    if cls is str:
        return data.decode("utf-8")
    if _has_from_dict(cls):
        return cls.from_dict(json.loads(data))
    return TypeAdapter(cls).validate_json(data)


def _has_from_dict(cls: Type) -> bool:
    try:
        if issubclass(cls, BaseModel):
            return False
    except TypeError:
        return False
    return hasattr(cls, "from_dict") and callable(cls.from_dict)
