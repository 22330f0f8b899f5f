"""Fixed enumerations for cashbook entries.

Categories, payment modes and printer devices are closed sets. The form, the
suggestion collaborator and the per-device page tally all validate against the
tuples defined here; order is the display order.
"""

from __future__ import annotations

from typing import Literal

ENTRY_TYPES: tuple[str, ...] = ("in", "out")

ALL_CATEGORIES: tuple[str, ...] = (
    "Sales",
    "Purchase",
    "Rent",
    "Salary",
    "Food",
    "Transportation",
    "Utilities",
    "Other",
)

ALL_PAYMENT_MODES: tuple[str, ...] = ("Cash", "bKash", "Nagad", "Bank", "Card")

PRINTER_OPTIONS: tuple[str, ...] = ("Toshiba 2523AD", "Epson L3250")

# Filter selector values beyond the plain enumerations
ALL = "all"
DUE_STATUSES: tuple[str, ...] = (ALL, "due", "paid")

type EntryType = Literal["in", "out"]


def is_category(value: object) -> bool:
    return isinstance(value, str) and value in ALL_CATEGORIES


def is_payment_mode(value: object) -> bool:
    return isinstance(value, str) and value in ALL_PAYMENT_MODES


def is_printer(value: object) -> bool:
    return isinstance(value, str) and value in PRINTER_OPTIONS


__all__ = [
    "ALL",
    "ALL_CATEGORIES",
    "ALL_PAYMENT_MODES",
    "DUE_STATUSES",
    "ENTRY_TYPES",
    "EntryType",
    "PRINTER_OPTIONS",
    "is_category",
    "is_payment_mode",
    "is_printer",
]
