"""Aggregation engine: dashboard and report totals.

Totals always cover the complete record set handed in, never the filtered
view, so the dashboard does not move when the user narrows the list. The
reduction is a single pass, order independent, and never mutates its input.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .categories import PRINTER_OPTIONS
from .models import Totals, Transaction


def aggregate(
    records: Iterable[Transaction],
    *,
    printers: Sequence[str] = PRINTER_OPTIONS,
) -> Totals:
    """Compute :class:`~cashbook.models.Totals` over ``records``.

    - ``total_in``/``total_out`` sum ``amount`` by entry type; entries with any
      other type contribute to neither.
    - ``total_due`` sums ``due_amount`` of due entries only.
    - ``total_pages`` sums ``pages`` over everything; ``device_pages`` only
      counts exact matches against ``printers``.
    """

    total_in = 0.0
    total_out = 0.0
    total_due = 0
    total_pages = 0
    device_pages = {name: 0 for name in printers}

    for r in records:
        if r.type == "in":
            total_in += r.amount
        elif r.type == "out":
            total_out += r.amount

        total_due += r.effective_due
        total_pages += r.pages
        if r.printer_name in device_pages:
            device_pages[r.printer_name] += r.pages

    return Totals(
        total_in=total_in,
        total_out=total_out,
        balance=total_in - total_out,
        total_due=total_due,
        total_pages=total_pages,
        device_pages=device_pages,
    )


__all__ = ["aggregate"]
