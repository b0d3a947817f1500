"""Typed results returned by repository reads and mutations.

Views keep rendering with best-effort data, so repositories report missing
ids, conflicts and failed writes as values instead of raising.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from .enums import ResultStatus
from .exceptions import StoreError

T = TypeVar("T")


@dataclass(frozen=True)
class ReadResult(Generic[T]):
    records: List[T] = field(default_factory=list)
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class MutationResult(Generic[T]):
    status: ResultStatus
    record: Optional[T] = None
    previous: Optional[T] = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.OK

    def unwrap(self) -> Optional[T]:
        """Return the affected record, raising the attached error on failure."""

        if self.error is not None:
            raise self.error
        return self.record

    @classmethod
    def success(cls, record: Optional[T], *, previous: Optional[T] = None) -> "MutationResult[T]":
        return cls(ResultStatus.OK, record=record, previous=previous)

    @classmethod
    def failure(cls, status: ResultStatus, error: StoreError, *, previous: Optional[T] = None) -> "MutationResult[T]":
        return cls(status, previous=previous, error=error)
