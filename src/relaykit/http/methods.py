"""HTTP method variants.

Two methods compare equal when their wire names match; payloads and query items
are not part of the comparison.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Generic, Optional, Sequence, Tuple, TypeVar

P = TypeVar("P")

QueryItems = Sequence[Tuple[str, str]]


class HttpMethod:
    name: ClassVar[str]

    def __eq__(self, other):
        if not isinstance(other, HttpMethod):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        return hash(self.name)


@dataclass(frozen=True, eq=False)
class Get(HttpMethod):
    name: ClassVar[str] = "GET"

    query_items: QueryItems = ()

    def __post_init__(self):
        object.__setattr__(self, "query_items", tuple((k, v) for k, v in self.query_items))


@dataclass(frozen=True, eq=False)
class Put(HttpMethod, Generic[P]):
    name: ClassVar[str] = "PUT"

    payload: Optional[P] = None


@dataclass(frozen=True, eq=False)
class Post(HttpMethod, Generic[P]):
    name: ClassVar[str] = "POST"

    payload: Optional[P] = None


@dataclass(frozen=True, eq=False)
class Delete(HttpMethod):
    name: ClassVar[str] = "DELETE"


@dataclass(frozen=True, eq=False)
class Head(HttpMethod):
    name: ClassVar[str] = "HEAD"


_METHODS = {cls.name: cls for cls in (Get, Put, Post, Delete, Head)}


def method_from_name(name: str, *, payload: Any = None, query_items: QueryItems = ()) -> HttpMethod:
    """Build a method variant from its wire name (case-insensitive).

    Raises:
        ValueError: If the name is not one of GET, PUT, POST, DELETE, HEAD
    """
    cls = _METHODS.get(name.upper())
    if cls is None:
        raise ValueError(f"Unsupported HTTP method '{name}'. Expected one of: {', '.join(_METHODS)}")
    if cls is Get:
        return Get(query_items)
    if cls in (Put, Post):
        return cls(payload)
    return cls()
