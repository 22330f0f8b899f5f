"""Canonical display order for a snapshot: newest first by ``date`` + ``time``.

Entries missing ``date``/``time`` sort as ``2000-01-01``/``00:00``. Entries
sharing a timestamp are ordered by ``id`` ascending so repeated snapshots
render identically.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from .models import Transaction

_FALLBACK_DATE = "2000-01-01"
_FALLBACK_TIME = "00:00"


def timestamp_of(record: Transaction) -> datetime:
    """Return the combined entry timestamp used for ordering."""

    raw = f"{record.date or _FALLBACK_DATE}T{record.time or _FALLBACK_TIME}"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return datetime.fromisoformat(f"{_FALLBACK_DATE}T{_FALLBACK_TIME}")


def sort_newest_first(records: Iterable[Transaction]) -> list[Transaction]:
    """Return a new list in display order; the input is not modified."""

    # Two stable passes: tie-break key first, then primary key descending.
    by_id = sorted(records, key=lambda r: r.id)
    return sorted(by_id, key=timestamp_of, reverse=True)


__all__ = ["sort_newest_first", "timestamp_of"]
