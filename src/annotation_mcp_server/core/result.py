"""
Result Values

Every core operation that can fail returns either a `Success` carrying the
payload or a `Failure` carrying a tagged error model. Domain failures are never
raised as exceptions; callers branch on `result.success`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Literal, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T
    success: Literal[True] = field(default=True, init=False)


@dataclass(frozen=True)
class Failure(Generic[E]):
    error: E
    success: Literal[False] = field(default=False, init=False)


Result = Union[Success[T], Failure[E]]


def success(data: T) -> Success[T]:
    return Success(data)


def failure(error: E) -> Failure[E]:
    return Failure(error)
