"""Result pattern for per-element resolution.

Element-level work inside a parse (geometry, property sets) returns a
Success or Failure instead of raising, so one bad element never aborts
the whole model.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Failed result carrying an error value (not an exception)."""

    error: E

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> None:
        raise ValueError(f"Cannot unwrap Failure: {self.error}")


Result = Success[T] | Failure[E]


def ok(value: T) -> Success[T]:
    return Success(value)


def err(error: E) -> Failure[E]:
    return Failure(error)
