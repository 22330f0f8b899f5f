"""Report/export surface.

A :class:`CashbookReport` is the stable input to any printing step: the
visible rows in display order, the full-set totals and a description of the
active filters. :func:`render_report_text` renders it for a terminal or a
plain-text printer; ``CashbookReport.model_dump_json()`` is the JSON export.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from .filters import describe_filters
from .ledger import derive_view
from .models import FilterState, Totals, Transaction
from .normalizers import coerce_records
from .ordering import sort_newest_first

CURRENCY = "৳"


class CashbookReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = "CashBook Report"
    generated_at: datetime
    filter_description: str
    totals: Totals
    rows: list[Transaction]


def build_report(
    records: Iterable[Mapping[str, Any] | Transaction],
    filters: FilterState,
    *,
    generated_at: datetime | None = None,
) -> CashbookReport:
    """Assemble a report from a snapshot (ordered here) and the active filters."""

    view = derive_view(sort_newest_first(coerce_records(records)), filters)
    return CashbookReport(
        generated_at=generated_at or datetime.now(),
        filter_description=describe_filters(filters),
        totals=view.totals,
        rows=list(view.records),
    )


# ---------------------------------------------------------------------------
# Plain-text rendering
# ---------------------------------------------------------------------------


def format_number(value: float) -> str:
    """Thousands separators, at most two decimals, no trailing zeros."""

    s = f"{value:,.2f}"
    return s.rstrip("0").rstrip(".") if "." in s else s


def format_money(value: float) -> str:
    return f"{CURRENCY} {format_number(value)}"


_COLUMNS: tuple[tuple[str, int], ...] = (
    ("Date/Time", 16),
    ("Printer", 15),
    ("Pages", 5),
    ("Category", 14),
    ("Status", 6),
    ("Due", 10),
    ("Details", 24),
    ("Cash In", 12),
    ("Cash Out", 12),
)


def _cell(text: str, width: int, *, right: bool = False) -> str:
    text = text if len(text) <= width else text[: width - 1] + "…"
    return text.rjust(width) if right else text.ljust(width)


def _row_cells(r: Transaction) -> list[str]:
    details = r.contact or "N/A"
    if r.remark:
        details = f"{details} / {r.remark}"
    return [
        f"{r.date or ''} {r.time or ''}".strip(),
        r.printer_name or "-",
        str(r.pages or 0),
        r.category,
        "Due" if r.is_due else "Paid",
        format_money(r.due_amount) if r.is_due and r.due_amount > 0 else "-",
        details,
        format_money(r.amount) if r.type == "in" else "-",
        format_money(r.amount) if r.type == "out" else "-",
    ]


def render_totals_text(totals: Totals) -> list[str]:
    lines = [
        f"Total Cash In:     {format_money(totals.total_in)}",
        f"Total Cash Out:    {format_money(totals.total_out)}",
        f"Net Balance:       {format_money(totals.balance)}",
        f"Total Due (Credit): {format_money(totals.total_due)}",
        f"Total Pages:       {format_number(totals.total_pages)}",
    ]
    for device, pages in totals.device_pages.items():
        lines.append(f"  {device} pages: {format_number(pages)}")
    return lines


def render_rows_text(rows: Iterable[Transaction]) -> list[str]:
    right_aligned = {"Pages", "Due", "Cash In", "Cash Out"}
    header = " ".join(_cell(name, w, right=name in right_aligned) for name, w in _COLUMNS)
    lines = [header, "-" * len(header)]
    for r in rows:
        cells = _row_cells(r)
        lines.append(
            " ".join(
                _cell(c, w, right=name in right_aligned)
                for c, (name, w) in zip(cells, _COLUMNS, strict=True)
            )
        )
    return lines


def render_report_text(report: CashbookReport) -> str:
    lines = [
        report.title.upper(),
        f"Generated on: {report.generated_at:%Y-%m-%d %H:%M}",
    ]
    if report.filter_description:
        lines.append(report.filter_description)
    lines.append("")
    lines.extend(render_totals_text(report.totals))
    lines.append("")
    lines.extend(render_rows_text(report.rows))
    if not report.rows:
        lines.append("No transactions match the current filters.")
    return "\n".join(lines)


__all__ = [
    "CURRENCY",
    "CashbookReport",
    "build_report",
    "format_money",
    "format_number",
    "render_report_text",
    "render_rows_text",
    "render_totals_text",
]
