"""Public interface for the ``cashbook`` package.

Re-exports the engine's models and pure operations as the stable import
surface. There is no runtime logic here, only symbol re-exports.
"""

from .aggregation import aggregate
from .errors import CashbookError, CollaboratorError, EntryValidationError
from .filters import describe_filters, filter_transactions, is_visible, reset_filters
from .ledger import Ledger, LedgerSession, LedgerView, derive_view
from .models import (
    Editing,
    EntryForm,
    EntryPayload,
    FieldSuggestion,
    FilterState,
    FormState,
    Idle,
    SuggestionContext,
    Totals,
    Transaction,
)
from .normalizers import build_payload, coerce_record
from .ordering import sort_newest_first
from .reconcile import (
    apply_suggestion,
    cancel_edit,
    plan_submission,
    set_field,
    start_edit,
    submit,
)
from .report import CashbookReport, build_report, render_report_text

__all__ = [
    # Engine
    "aggregate",
    "apply_suggestion",
    "build_payload",
    "build_report",
    "cancel_edit",
    "coerce_record",
    "derive_view",
    "describe_filters",
    "filter_transactions",
    "is_visible",
    "plan_submission",
    "render_report_text",
    "reset_filters",
    "set_field",
    "sort_newest_first",
    "start_edit",
    "submit",
    # Ledger
    "Ledger",
    "LedgerSession",
    "LedgerView",
    # Models / types
    "CashbookReport",
    "Editing",
    "EntryForm",
    "EntryPayload",
    "FieldSuggestion",
    "FilterState",
    "FormState",
    "Idle",
    "SuggestionContext",
    "Totals",
    "Transaction",
    # Errors
    "CashbookError",
    "CollaboratorError",
    "EntryValidationError",
]
