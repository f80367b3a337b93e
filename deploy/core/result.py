"""Result type for explicit error handling.

Every pipeline step returns a Result instead of raising, so a failed step
is data the orchestrator can stop on:

    def parse(line: str) -> Result[int, str]:
        if not line.isdigit():
            return Err(f"not a number: {line}")
        return Ok(int(line))

    match parse("42"):
        case Ok(value):
            print(value)
        case Err(error):
            print(error)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful result holding `value`."""

    value: T

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Apply f to the contained value."""
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed result holding `error`."""

    error: E

    def map(self, f: Callable[[T], U]) -> Err[E]:
        """Return self unchanged."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]

