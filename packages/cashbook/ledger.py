"""Ledger state: snapshot handling and the derived dashboard view.

:func:`derive_view` is the pure core: given an ordered snapshot and a filter
state it returns the visible rows and the totals over the full snapshot.

:class:`Ledger` holds the current snapshot. Every storage push replaces it
wholesale after ordering; there is no merging and no local mutation on write.

:class:`LedgerSession` binds a ledger to one user's storage subscription and
keeps the filter and form states, applying the pure transitions from
:mod:`cashbook.filters` and :mod:`cashbook.reconcile`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from . import reconcile
from .aggregation import aggregate
from .errors import CollaboratorError, EntryValidationError
from .filters import filter_transactions, reset_filters, update_filter
from .logging_setup import get_logger
from .models import FieldSuggestion, FilterState, FormState, SuggestionContext, Totals, Transaction
from .normalizers import coerce_records
from .ordering import sort_newest_first
from .storage import EntryStore, Unsubscribe

_logger = get_logger("cashbook.ledger")


@dataclass(frozen=True, slots=True)
class LedgerView:
    """What the front-end renders: visible rows plus dashboard totals."""

    records: tuple[Transaction, ...]
    totals: Totals
    filters: FilterState
    total_count: int


def derive_view(records: Iterable[Transaction], filters: FilterState) -> LedgerView:
    """Derive the visible subset and full-set totals from one snapshot.

    ``records`` are expected in display order; the visible subset keeps it.
    """

    snapshot = list(records)
    return LedgerView(
        records=tuple(filter_transactions(snapshot, filters)),
        totals=aggregate(snapshot),
        filters=filters,
        total_count=len(snapshot),
    )


class Ledger:
    """The current ordered snapshot of one user's entries."""

    def __init__(self) -> None:
        self._records: tuple[Transaction, ...] = ()

    @property
    def records(self) -> tuple[Transaction, ...]:
        return self._records

    def replace_snapshot(self, raw: Iterable[Mapping[str, Any] | Transaction]) -> None:
        self._records = tuple(sort_newest_first(coerce_records(raw)))
        _logger.debug("ledger:snapshot entries=%d", len(self._records))

    def find(self, entry_id: str) -> Transaction | None:
        return next((r for r in self._records if r.id == entry_id), None)

    def view(self, filters: FilterState) -> LedgerView:
        return derive_view(self._records, filters)


type Suggester = Callable[[SuggestionContext], FieldSuggestion | None]


class LedgerSession:
    """One user's live ledger: subscription, filters and the entry form."""

    def __init__(
        self,
        store: EntryStore,
        *,
        user_id: str | None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._user_id = user_id
        self._clock = clock
        self._unsubscribe: Unsubscribe | None = None
        self.ledger = Ledger()
        self.filters: FilterState = reset_filters()
        self.form_state: FormState = reconcile.initial_state()

    # ---- Subscription ----------------------------------------------------

    def start(self) -> None:
        if self._unsubscribe is not None or not self._user_id:
            return
        self._unsubscribe = self._store.subscribe(self._user_id, self.ledger.replace_snapshot)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> LedgerSession:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ---- View ------------------------------------------------------------

    def view(self) -> LedgerView:
        return self.ledger.view(self.filters)

    def set_filter(self, name: str, value: str) -> None:
        self.filters = update_filter(self.filters, name, value)

    def reset_filters(self) -> None:
        self.filters = reset_filters()

    # ---- Form ------------------------------------------------------------

    def set_field(self, name: str, value: str | bool) -> None:
        self.form_state = reconcile.set_field(self.form_state, name, value)

    def start_edit(self, entry_id: str) -> None:
        record = self.ledger.find(entry_id)
        if record is None:
            raise LookupError(f"No entry {entry_id!r} in the current snapshot")
        self.form_state = reconcile.start_edit(self.form_state, record)

    def cancel_edit(self) -> None:
        self.form_state = reconcile.cancel_edit(self.form_state)

    def submit(self) -> None:
        """Submit the form; on failure the form state is left as it was."""

        self.form_state = reconcile.submit(
            self.form_state,
            store=self._store,
            user_id=self._user_id,
            clock=self._clock,
        )

    def request_suggestion(self, suggester: Suggester) -> None:
        """Pre-fill category/payment mode from ``suggester`` when it answers."""

        form = self.form_state.form
        suggestion = suggester(
            SuggestionContext(
                type=form.type, contact=form.contact, remark=form.remark, amount=form.amount
            )
        )
        self.form_state = reconcile.apply_suggestion(self.form_state, suggestion)

    def delete(self, entry_id: str) -> None:
        if not self._user_id:
            raise EntryValidationError("user", "A signed-in user is required.")
        try:
            self._store.delete(self._user_id, entry_id)
        except Exception as e:
            _logger.error("ledger:delete_failed entry_id=%s error=%s", entry_id, e.__class__.__name__)
            raise CollaboratorError(f"Failed to delete transaction: {e}") from e


__all__ = ["Ledger", "LedgerSession", "LedgerView", "Suggester", "derive_view"]
