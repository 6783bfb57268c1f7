"""
Dashboard aggregation over a user's consumption entries.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from .models import CategoryTotals, DashboardSummary, MonthlyAggregate


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, dict):
        return entry.get(name)
    return getattr(entry, name, None)


def _dec(value: Any) -> Decimal:
    return Decimal(str(value or 0))


def _entry_month(entry: Any) -> str:
    value = _field(entry, "date")
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return f"{value.year:04d}-{value.month:02d}"


class _Bucket:
    __slots__ = ("quantity", "emissions", "credits", "count")

    def __init__(self):
        self.quantity = Decimal(0)
        self.emissions = Decimal(0)
        self.credits = 0
        self.count = 0

    def add(self, entry: Any) -> None:
        self.quantity += _dec(_field(entry, "quantity"))
        self.emissions += _dec(_field(entry, "carbon_emissions"))
        self.credits += int(_field(entry, "credits_earned") or 0)
        self.count += 1

    def to_totals(self) -> CategoryTotals:
        return CategoryTotals(
            total_quantity=float(self.quantity),
            total_emissions=float(self.emissions),
            total_credits=self.credits,
            entry_count=self.count,
        )


def monthly_series(entries: Iterable[Any]) -> List[MonthlyAggregate]:
    """Group entries by activity month. Sparse: months without entries are omitted."""
    buckets: Dict[str, _Bucket] = defaultdict(_Bucket)
    for entry in entries:
        buckets[_entry_month(entry)].add(entry)
    return [
        MonthlyAggregate(
            month=month,
            total_emissions=float(bucket.emissions),
            total_credits_earned=bucket.credits,
            entry_count=bucket.count,
        )
        for month, bucket in sorted(buckets.items())
    ]


def summarize(entries: Iterable[Any]) -> DashboardSummary:
    """Totals, monthly series and per-kind/per-category breakdowns."""
    items = list(entries)
    overall = _Bucket()
    by_kind: Dict[str, _Bucket] = defaultdict(_Bucket)
    by_category: Dict[str, _Bucket] = defaultdict(_Bucket)

    for entry in items:
        overall.add(entry)
        by_kind[str(_field(entry, "kind") or "unknown")].add(entry)
        by_category[str(_field(entry, "category") or "unknown")].add(entry)

    return DashboardSummary(
        total_consumption=float(overall.quantity),
        total_emissions=float(overall.emissions),
        total_credits=overall.credits,
        entry_count=overall.count,
        monthly=monthly_series(items),
        by_kind={key: bucket.to_totals() for key, bucket in sorted(by_kind.items())},
        by_category={key: bucket.to_totals() for key, bucket in sorted(by_category.items())},
    )
