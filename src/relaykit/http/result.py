"""Typed outcome handed to completion callbacks."""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from relaykit.http.errors import RequestError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """A decoded response value."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """A classified request failure."""

    error: RequestError

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


Result = Union[Success[T], Failure]
