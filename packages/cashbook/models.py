"""Data models and type aliases for ``cashbook``.

Two families live here:

- Stored/serialized shapes (``Transaction``, ``Totals``, ``FieldSuggestion``)
  are Pydantic models. ``Transaction`` validates raw storage documents
  leniently: missing or junk ``pages``/``dueAmount``/``date`` values are
  defaulted rather than rejected.
- In-memory UI buffers (``EntryForm``, ``FilterState``, ``FormState``) and the
  normalized ``EntryPayload`` are frozen dataclasses threaded through pure
  transition functions.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .categories import ALL, PRINTER_OPTIONS

# ---------------------------------------------------------------------------
# Lenient numeric coercion (parseInt/parseFloat prefix semantics)
# ---------------------------------------------------------------------------

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_int_prefix(raw: Any) -> int | None:
    """Return the leading integer of ``raw`` or ``None`` when there is none.

    Numbers are truncated toward zero; strings contribute their leading
    integer digits (``"5.7"`` -> 5, ``"12 pages"`` -> 12).
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if raw != raw or raw in (float("inf"), float("-inf")):
            return None
        return int(raw)
    m = _INT_PREFIX_RE.match(str(raw))
    return int(m.group(1)) if m else None


def parse_float_prefix(raw: Any) -> float | None:
    """Return the leading decimal number of ``raw`` or ``None``.

    Non-finite results (NaN, overflow to infinity) count as no number.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int | float):
        try:
            value = float(raw)
        except OverflowError:
            return None
    else:
        m = _FLOAT_PREFIX_RE.match(str(raw))
        if not m:
            return None
        value = float(m.group(1))
    return value if math.isfinite(value) else None


def _truthy(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    return bool(raw)


# ---------------------------------------------------------------------------
# Stored record
# ---------------------------------------------------------------------------


class Transaction(BaseModel):
    """A single cashbook entry as delivered by the storage collaborator.

    Attribute names are snake_case; the camelCase document keys
    (``paymentMode``, ``isDue``, ``dueAmount``, ``printerName``,
    ``createdAt``, ``updatedAt``) are accepted as aliases.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str = ""
    type: str = ""
    amount: float = 0.0
    category: str = ""
    payment_mode: str = Field(default="", alias="paymentMode")
    is_due: bool = Field(default=False, alias="isDue")
    due_amount: int = Field(default=0, alias="dueAmount")
    contact: str | None = None
    remark: str | None = None
    printer_name: str = Field(default="", alias="printerName")
    pages: int = 0
    date: str | None = None
    time: str | None = None
    created_at: Any = Field(default=None, alias="createdAt")
    updated_at: Any = Field(default=None, alias="updatedAt")

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("type", "category", "payment_mode", "printer_name", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_lenient(cls, v: Any) -> float:
        parsed = parse_float_prefix(v)
        return parsed if parsed is not None else 0.0

    @field_validator("pages", "due_amount", mode="before")
    @classmethod
    def _int_lenient(cls, v: Any) -> int:
        parsed = parse_int_prefix(v)
        return parsed if parsed is not None else 0

    @field_validator("is_due", mode="before")
    @classmethod
    def _due_flag(cls, v: Any) -> bool:
        return _truthy(v)

    @field_validator("date", "time", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> str | None:
        if v is None:
            return None
        s = str(v).strip()
        return s or None

    @property
    def effective_due(self) -> int:
        """``due_amount`` when the entry is due, else 0."""

        return self.due_amount if self.is_due else 0


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------


class Totals(BaseModel):
    """Dashboard totals computed over the full (unfiltered) record set."""

    model_config = ConfigDict(frozen=True)

    total_in: float = 0.0
    total_out: float = 0.0
    balance: float = 0.0
    total_due: int = 0
    total_pages: int = 0
    device_pages: dict[str, int] = Field(
        default_factory=lambda: {name: 0 for name in PRINTER_OPTIONS}
    )


# ---------------------------------------------------------------------------
# Suggestion collaborator I/O
# ---------------------------------------------------------------------------


class FieldSuggestion(BaseModel):
    """Suggested category/payment mode. Values are unvalidated model output."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    suggested_category: str | None = Field(default=None, alias="suggestedCategory")
    suggested_payment_mode: str | None = Field(default=None, alias="suggestedPaymentMode")


@dataclass(frozen=True, slots=True)
class SuggestionContext:
    """Transaction context sent to the suggestion collaborator."""

    type: str
    contact: str = ""
    remark: str = ""
    amount: str = ""


# ---------------------------------------------------------------------------
# UI buffers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EntryForm:
    """Working form buffer. Numeric fields hold raw text as typed."""

    type: str = "in"
    amount: str = ""
    category: str = "Sales"
    payment_mode: str = "Cash"
    is_due: bool = False
    due_amount: str = ""
    contact: str = ""
    printer_name: str = PRINTER_OPTIONS[0]
    pages: str = ""
    remark: str = ""


@dataclass(frozen=True, slots=True)
class FilterState:
    """Active view constraints. Empty strings and ``"all"`` mean no constraint."""

    text: str = ""
    type: str = ALL
    category: str = ALL
    due_status: str = ALL
    start_date: str = ""
    end_date: str = ""


@dataclass(frozen=True, slots=True)
class Idle:
    """No record is selected for edit; submissions create."""


@dataclass(frozen=True, slots=True)
class Editing:
    """A stored record is loaded into the form; submissions update it."""

    record_id: str


@dataclass(frozen=True, slots=True)
class FormState:
    phase: Idle | Editing = field(default_factory=Idle)
    form: EntryForm = field(default_factory=EntryForm)

    @property
    def editing_id(self) -> str | None:
        return self.phase.record_id if isinstance(self.phase, Editing) else None


# ---------------------------------------------------------------------------
# Normalized payload handed to storage
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EntryPayload:
    """A validated, normalized entry ready for the storage collaborator.

    ``date``/``time`` are only set on the create path.
    """

    type: str
    amount: float
    category: str
    payment_mode: str
    is_due: bool
    due_amount: int
    contact: str
    remark: str
    printer_name: str
    pages: int
    date: str | None = None
    time: str | None = None

    def stamped(self, now: datetime) -> EntryPayload:
        """Return a copy carrying ``now`` as the entry date (ISO) and time (HH:MM)."""

        return EntryPayload(
            type=self.type,
            amount=self.amount,
            category=self.category,
            payment_mode=self.payment_mode,
            is_due=self.is_due,
            due_amount=self.due_amount,
            contact=self.contact,
            remark=self.remark,
            printer_name=self.printer_name,
            pages=self.pages,
            date=now.date().isoformat(),
            time=now.strftime("%H:%M"),
        )

    def to_document(self) -> dict[str, Any]:
        """Return the camelCase document shape; omits unset ``date``/``time``."""

        doc: dict[str, Any] = {
            "type": self.type,
            "amount": self.amount,
            "category": self.category,
            "paymentMode": self.payment_mode,
            "isDue": self.is_due,
            "dueAmount": self.due_amount,
            "contact": self.contact,
            "remark": self.remark,
            "printerName": self.printer_name,
            "pages": self.pages,
        }
        if self.date is not None:
            doc["date"] = self.date
        if self.time is not None:
            doc["time"] = self.time
        return doc


# Generic collections
type Records = Iterable[Transaction]
type RawRecords = Iterable[Mapping[str, Any]]
