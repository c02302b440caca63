"""Result envelopes returned at the service boundary.

`ServiceResult` carries either data or an error message; `MaybeResult`
additionally distinguishes "not found" (with an optional error) from a hit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    success: bool
    data: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, data: T) -> "ServiceResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ServiceResult[T]":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class MaybeResult(Generic[T]):
    found: bool
    data: T | None = None
    error: str | None = None

    @classmethod
    def hit(cls, data: T) -> "MaybeResult[T]":
        return cls(found=True, data=data)

    @classmethod
    def miss(cls, error: str | None = None) -> "MaybeResult[T]":
        return cls(found=False, error=error)
