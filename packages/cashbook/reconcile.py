"""Edit/create reconciliation for the entry form.

The form is a two-phase state machine over immutable :class:`FormState`
values:

- ``Idle``: submissions create a new entry stamped with the current date and
  time. Afterwards only the transient fields are cleared; type, category,
  payment mode and printer stay as sticky defaults for the next entry.
- ``Editing(record_id)``: submissions update that entry. ``date``/``time`` are
  never loaded into the form nor resubmitted, so the stored values survive.

Every transition is a pure function returning a new state. :func:`submit` is
the only function that talks to the storage collaborator; it does not touch
any local record set. The visible ledger changes only when storage pushes its
next snapshot.

Submission gates run in a fixed order and the first failure wins:

1. a user/session context is present;
2. ``amount`` is present;
3. ``pages`` is present for ``in`` entries;
4. ``due_amount`` is present for due entries.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Literal

from .categories import ENTRY_TYPES, PRINTER_OPTIONS, is_category, is_payment_mode, is_printer
from .errors import CollaboratorError, EntryValidationError
from .logging_setup import get_logger
from .models import (
    Editing,
    EntryForm,
    EntryPayload,
    FieldSuggestion,
    FormState,
    Idle,
    Transaction,
)
from .normalizers import build_payload, format_amount, is_present
from .storage import EntryStore

_logger = get_logger("cashbook.reconcile")

_FORM_FIELDS: frozenset[str] = frozenset(f.name for f in fields(EntryForm))


@dataclass(frozen=True, slots=True)
class Submission:
    """A validated storage call: create a new entry or update ``entry_id``."""

    kind: Literal["create", "update"]
    payload: EntryPayload
    entry_id: str | None = None


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def initial_state() -> FormState:
    return FormState()


def set_field(state: FormState, name: str, value: str | bool) -> FormState:
    """Return ``state`` with one form field changed.

    Mirrors the entry form's coupled fields: clearing ``is_due`` clears
    ``due_amount``; switching to ``out`` clears ``pages``; switching to ``in``
    keeps the current printer or falls back to the first known one.
    """

    if name not in _FORM_FIELDS:
        raise ValueError(f"Unknown form field: {name!r}")
    form = state.form

    if name == "is_due":
        is_due = bool(value)
        form = replace(form, is_due=is_due, due_amount=form.due_amount if is_due else "")
    elif name == "type":
        if value not in ENTRY_TYPES:
            raise EntryValidationError("type", f"Entry type must be one of {ENTRY_TYPES}")
        if value == "out":
            form = replace(form, type="out", pages="")
        else:
            form = replace(form, type="in", printer_name=form.printer_name or PRINTER_OPTIONS[0])
    else:
        form = replace(form, **{name: "" if value is None else str(value)})

    return replace(state, form=form)


def start_edit(state: FormState, record: Transaction) -> FormState:
    """``Idle``/``Editing`` -> ``Editing(record.id)`` with the record's editable fields."""

    if not record.id:
        raise ValueError("Cannot edit a record without an id")
    printer = (
        record.printer_name
        if record.type == "in" and is_printer(record.printer_name)
        else PRINTER_OPTIONS[0]
    )
    form = EntryForm(
        type=record.type,
        amount=format_amount(record.amount),
        category=record.category,
        payment_mode=record.payment_mode,
        is_due=record.is_due,
        due_amount=str(record.due_amount) if record.due_amount else "",
        contact=record.contact or "",
        printer_name=printer,
        pages=str(record.pages) if record.pages else "",
        remark=record.remark or "",
    )
    return FormState(phase=Editing(record_id=record.id), form=form)


def cancel_edit(state: FormState) -> FormState:
    """Discard the buffer and return to ``Idle`` with default fields."""

    return FormState()


def clear_transient(state: FormState) -> FormState:
    """``Idle`` -> ``Idle`` after a create: keep the sticky selections only."""

    form = replace(
        state.form,
        amount="",
        contact="",
        remark="",
        pages="",
        is_due=False,
        due_amount="",
    )
    return FormState(phase=Idle(), form=form)


def apply_suggestion(state: FormState, suggestion: FieldSuggestion | None) -> FormState:
    """Pre-fill category/payment mode from a suggestion.

    Each value is applied only when it belongs to its fixed set; anything else
    leaves the current field untouched.
    """

    if suggestion is None:
        return state
    form = state.form
    if is_category(suggestion.suggested_category):
        form = replace(form, category=suggestion.suggested_category)
    if is_payment_mode(suggestion.suggested_payment_mode):
        form = replace(form, payment_mode=suggestion.suggested_payment_mode)
    return replace(state, form=form)


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


def check_gates(state: FormState, *, user_id: str | None) -> None:
    """Run the ordered presence gates; raise on the first failure."""

    form = state.form
    if not user_id:
        raise EntryValidationError("user", "A signed-in user is required.")
    if not is_present(form.amount):
        raise EntryValidationError("amount", "Amount is required.")
    if form.type == "in" and not is_present(form.pages):
        raise EntryValidationError("pages", "Pages are required for Cash In.")
    if form.is_due and not is_present(form.due_amount):
        raise EntryValidationError("due_amount", "Due Amount is required if marked as due.")


def plan_submission(
    state: FormState,
    *,
    user_id: str | None,
    now: datetime,
) -> Submission:
    """Validate ``state`` and describe the storage call it produces.

    Pure: raises ``EntryValidationError`` and performs no I/O.
    """

    check_gates(state, user_id=user_id)
    payload = build_payload(state.form)
    if isinstance(state.phase, Editing):
        return Submission(kind="update", payload=payload, entry_id=state.phase.record_id)
    return Submission(kind="create", payload=payload.stamped(now))


def submit(
    state: FormState,
    *,
    store: EntryStore,
    user_id: str | None,
    clock: Callable[[], datetime] = datetime.now,
) -> FormState:
    """Validate, hand the entry to ``store`` and return the next state.

    On any failure the caller keeps ``state``: validation errors raise
    ``EntryValidationError`` before storage is touched, storage failures raise
    ``CollaboratorError``.
    """

    try:
        plan = plan_submission(state, user_id=user_id, now=clock())
    except EntryValidationError as e:
        _logger.info("submit:rejected field=%s reason=%s", e.field, e)
        raise

    assert user_id is not None  # enforced by the first gate
    try:
        if plan.kind == "update":
            assert plan.entry_id is not None
            store.update(user_id, plan.entry_id, plan.payload)
        else:
            new_id = store.create(user_id, plan.payload)
    except CollaboratorError:
        raise
    except Exception as e:
        _logger.error(
            "submit:storage_failed kind=%s entry_id=%s error=%s",
            plan.kind,
            plan.entry_id,
            e.__class__.__name__,
        )
        action = "update" if plan.kind == "update" else "save"
        raise CollaboratorError(f"Failed to {action} transaction: {e}") from e

    if plan.kind == "update":
        _logger.info("submit:updated entry_id=%s", plan.entry_id)
        return cancel_edit(state)
    _logger.info("submit:created entry_id=%s", new_id)
    return clear_transient(state)


__all__ = [
    "Submission",
    "apply_suggestion",
    "cancel_edit",
    "check_gates",
    "clear_transient",
    "initial_state",
    "plan_submission",
    "set_field",
    "start_edit",
    "submit",
]
