"""
app/domain/user_integration.py

Domain models for user fetch orchestration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from math import ceil
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class FetchUsersSummary:
    """
    Outcome of one fetch-and-reconcile run for a source.
    """

    source_name: str
    users_fetched: int
    message: str


@dataclass(frozen=True)
class RecordFailure:
    """
    One normalized record that could not be reconciled.
    """

    index: int
    reason: str
    external_id: str | None = None


@dataclass(frozen=True)
class ReconciliationResult:
    """
    Counts for one reconciliation batch.
    """

    total: int
    saved: int
    failures: list[RecordFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


@dataclass(frozen=True)
class Page(Generic[T]):
    """
    One zero-based page of a listing.
    """

    items: Sequence[T]
    page: int
    size: int
    total_items: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return ceil(self.total_items / self.size)
