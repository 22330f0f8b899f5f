"""Form-input and storage-record normalizers.

One parse function per weakly typed form field, each with a documented failure
mode (``EntryValidationError``), plus :func:`build_payload` which composes them
into an :class:`~cashbook.models.EntryPayload`. Storage documents go the other
way through :func:`coerce_record`, which never rejects a record.

Numeric parsing follows ``parseInt``/``parseFloat`` prefix semantics: the
leading number of the text is used (``"5.7"`` pages -> 5).
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from .errors import EntryValidationError
from .models import (
    EntryForm,
    EntryPayload,
    Transaction,
    parse_float_prefix,
    parse_int_prefix,
)

# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def is_present(raw: str | None) -> bool:
    """Return True when a form value was supplied (non-blank text)."""

    return raw is not None and bool(str(raw).strip())


# ---------------------------------------------------------------------------
# Per-field parsers
# ---------------------------------------------------------------------------


def parse_amount(raw: str | None) -> float:
    """Parse the required ``amount`` field.

    Raises ``EntryValidationError`` when absent, negative, or not a finite
    number.
    """

    if not is_present(raw):
        raise EntryValidationError("amount", "Amount is required.")
    value = parse_float_prefix(raw)
    if value is None:
        raise EntryValidationError("amount", f"Amount is not a number: {raw!r}")
    if value < 0:
        raise EntryValidationError("amount", "Amount must not be negative.")
    return value


def parse_pages(raw: str | None, *, entry_type: str) -> int:
    """Parse ``pages``; only ``in`` entries carry pages, everything else is 0.

    Raises ``EntryValidationError`` for a supplied value that is not a
    non-negative integer.
    """

    if entry_type != "in" or not is_present(raw):
        return 0
    value = parse_int_prefix(raw)
    if value is None:
        raise EntryValidationError("pages", f"Pages is not a number: {raw!r}")
    if value < 0:
        raise EntryValidationError("pages", "Pages must not be negative.")
    return value


def parse_due_amount(raw: str | None, *, is_due: bool) -> int:
    """Parse ``dueAmount``; non-due entries always carry 0.

    A due entry must owe at least 1.
    """

    if not is_due or not is_present(raw):
        return 0
    value = parse_int_prefix(raw)
    if value is None:
        raise EntryValidationError("due_amount", f"Due amount is not a number: {raw!r}")
    if value < 1:
        raise EntryValidationError("due_amount", "Due amount must be at least 1.")
    return value


def normalize_printer_name(raw: str | None, *, entry_type: str) -> str:
    """Pass the printer through for ``in`` entries; blank it for ``out``."""

    if entry_type == "out":
        return ""
    return raw or ""


def _text(raw: str | None) -> str:
    return (raw or "").strip()


# ---------------------------------------------------------------------------
# Payload
# ---------------------------------------------------------------------------


def build_payload(form: EntryForm) -> EntryPayload:
    """Normalize a form buffer into a storage payload (no date/time)."""

    return EntryPayload(
        type=form.type,
        amount=parse_amount(form.amount),
        category=form.category,
        payment_mode=form.payment_mode,
        is_due=bool(form.is_due),
        due_amount=parse_due_amount(form.due_amount, is_due=bool(form.is_due)),
        contact=_text(form.contact),
        remark=_text(form.remark),
        printer_name=normalize_printer_name(form.printer_name, entry_type=form.type),
        pages=parse_pages(form.pages, entry_type=form.type),
    )


# ---------------------------------------------------------------------------
# Storage records
# ---------------------------------------------------------------------------


def coerce_record(raw: Mapping[str, Any] | Transaction) -> Transaction:
    """Validate a storage document into a :class:`Transaction`, defaulting gaps."""

    if isinstance(raw, Transaction):
        return raw
    return Transaction.model_validate(dict(raw))


def coerce_records(raw: Iterable[Mapping[str, Any] | Transaction]) -> list[Transaction]:
    return [coerce_record(r) for r in raw]


def format_amount(value: float) -> str:
    """Render a number the way JavaScript's ``String(number)`` does.

    Integral values print without a fractional part (``100``), others use the
    shortest round-tripping representation (``12.5``).
    """

    if not math.isfinite(value):
        return str(value)
    if value == int(value) and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


__all__ = [
    "build_payload",
    "coerce_record",
    "coerce_records",
    "format_amount",
    "is_present",
    "normalize_printer_name",
    "parse_amount",
    "parse_due_amount",
    "parse_pages",
]
