"""Filter predicate engine.

A record is visible iff all five predicates pass (logical AND):

- text: coarse case-insensitive substring match over several fields, with the
  ``due``/``paid`` keyword special case;
- type, category: ``"all"`` or exact equality;
- due status: ``"due"``/``"paid"``/``"all"``;
- date range: inclusive start, end inclusive of its whole calendar day.

Absent or malformed filter values mean "no constraint"; nothing here raises.
Records without a usable ``date`` bypass the range check entirely (fail-open),
which keeps legacy entries visible under any date range.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import fields, replace
from datetime import date, timedelta

from .categories import ALL, ENTRY_TYPES, is_category
from .models import FilterState, Transaction
from .normalizers import format_amount


def _parse_iso_date(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw.strip()[:10])
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def matches_text(record: Transaction, text: str) -> bool:
    if not text:
        return True
    needle = text.lower()
    haystack = (
        record.contact,
        record.remark,
        record.category,
        record.printer_name,
        record.payment_mode,
    )
    if any(f and needle in f.lower() for f in haystack):
        return True
    if needle in format_amount(record.amount):
        return True
    if record.is_due and "due" in needle:
        return True
    return not record.is_due and "paid" in needle


def matches_type(record: Transaction, entry_type: str) -> bool:
    if entry_type not in ENTRY_TYPES:
        return True
    return record.type == entry_type


def matches_category(record: Transaction, category: str) -> bool:
    if not is_category(category):
        return True
    return record.category == category


def matches_due_status(record: Transaction, due_status: str) -> bool:
    if due_status == "due":
        return record.is_due
    if due_status == "paid":
        return not record.is_due
    return True


def matches_date_range(record: Transaction, start_date: str, end_date: str) -> bool:
    record_date = _parse_iso_date(record.date)
    if record_date is None:
        return True
    start = _parse_iso_date(start_date)
    if start is not None and record_date < start:
        return False
    end = _parse_iso_date(end_date)
    if end is not None and record_date >= end + timedelta(days=1):
        return False
    return True


def is_visible(record: Transaction, filters: FilterState) -> bool:
    """Return True when ``record`` passes every active predicate."""

    return (
        matches_text(record, filters.text)
        and matches_type(record, filters.type)
        and matches_category(record, filters.category)
        and matches_due_status(record, filters.due_status)
        and matches_date_range(record, filters.start_date, filters.end_date)
    )


def filter_transactions(
    records: Iterable[Transaction], filters: FilterState
) -> list[Transaction]:
    """Return the visible records, preserving input order."""

    return [r for r in records if is_visible(r, filters)]


# ---------------------------------------------------------------------------
# Filter state helpers
# ---------------------------------------------------------------------------


def reset_filters() -> FilterState:
    return FilterState()


def update_filter(filters: FilterState, name: str, value: str) -> FilterState:
    """Return a copy of ``filters`` with one field replaced.

    Unknown field names are ignored.
    """

    if name not in {f.name for f in fields(FilterState)}:
        return filters
    return replace(filters, **{name: value if value is not None else ""})


def describe_filters(filters: FilterState) -> str:
    """Human-readable summary of the active filters for report headers.

    Empty string when no filter is active.
    """

    parts: list[str] = []
    range_parts: list[str] = []
    if filters.start_date:
        range_parts.append(f"From: {filters.start_date}")
    if filters.end_date:
        range_parts.append(f"To: {filters.end_date}")
    if range_parts:
        parts.append(" | ".join(range_parts))
    if filters.type != ALL or filters.category != ALL or filters.due_status != ALL:
        parts.append(
            f"Type: {filters.type} | Category: {filters.category} | Status: {filters.due_status}"
        )
    if filters.text:
        parts.append(f'Search: "{filters.text}"')
    return " | ".join(parts)


__all__ = [
    "describe_filters",
    "filter_transactions",
    "is_visible",
    "matches_category",
    "matches_date_range",
    "matches_due_status",
    "matches_text",
    "matches_type",
    "reset_filters",
    "update_filter",
]
