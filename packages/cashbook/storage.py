# ruff: noqa: I001
"""Storage collaborator contract and its SQLAlchemy implementation.

The engine consumes storage through :class:`EntryStore`:

- ``subscribe(user_id, callback)`` pushes the user's complete entry list on
  subscription and after every committed write. Each push is a full
  replacement, never a delta. Returns an unsubscribe callable.
- ``create``/``update``/``delete`` write one entry. Errors propagate to the
  caller unchanged; nothing here retries.

:class:`SqlEntryStore` keeps entries in the ``cb_entries`` table owned by
``libs/db`` and notifies in-process subscribers after each commit.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from cashbook_db.client import create_schema, session_scope
from cashbook_db.models.entries import CbEntry
from .logging_setup import get_logger
from .models import EntryPayload

type SnapshotCallback = Callable[[list[dict[str, Any]]], None]
type Unsubscribe = Callable[[], None]

_logger = get_logger("cashbook.storage")


class EntryStore(Protocol):
    def subscribe(self, user_id: str, callback: SnapshotCallback) -> Unsubscribe: ...

    def create(self, user_id: str, payload: EntryPayload) -> str: ...

    def update(self, user_id: str, entry_id: str, payload: EntryPayload) -> None: ...

    def delete(self, user_id: str, entry_id: str) -> None: ...


class EntryNotFoundError(LookupError):
    """No entry with the given id exists for the user."""


def _row_to_document(row: CbEntry) -> dict[str, Any]:
    return {
        "id": row.id,
        "type": row.type,
        "amount": row.amount,
        "category": row.category,
        "paymentMode": row.payment_mode,
        "isDue": row.is_due,
        "dueAmount": row.due_amount,
        "contact": row.contact,
        "remark": row.remark,
        "printerName": row.printer_name,
        "pages": row.pages,
        "date": row.date,
        "time": row.time,
        "createdAt": row.created_at,
        "updatedAt": row.updated_at,
    }


def _payload_columns(payload: EntryPayload) -> dict[str, Any]:
    """Map a payload onto ORM columns, excluding ``date``/``time``."""

    return {
        "type": payload.type,
        "amount": payload.amount,
        "category": payload.category,
        "payment_mode": payload.payment_mode,
        "is_due": payload.is_due,
        "due_amount": payload.due_amount,
        "contact": payload.contact or None,
        "remark": payload.remark or None,
        "printer_name": payload.printer_name,
        "pages": payload.pages,
    }


class SqlEntryStore:
    """User-scoped entry store over SQLAlchemy with in-process snapshot pushes."""

    def __init__(self, *, database_url: str | None = None, create_tables: bool = False) -> None:
        self._database_url = database_url
        self._subscribers: dict[str, list[SnapshotCallback]] = {}
        if create_tables:
            create_schema(database_url=database_url)

    # ---- Reads -----------------------------------------------------------

    def list_documents(self, user_id: str) -> list[dict[str, Any]]:
        """Return the user's entries as camelCase documents (unordered)."""

        with session_scope(database_url=self._database_url) as session:
            rows = session.execute(select(CbEntry).where(CbEntry.user_id == user_id)).scalars()
            return [_row_to_document(r) for r in rows]

    def get_document(self, user_id: str, entry_id: str) -> Mapping[str, Any]:
        with session_scope(database_url=self._database_url) as session:
            row = self._get_row(session, user_id, entry_id)
            return _row_to_document(row)

    @staticmethod
    def _get_row(session: Session, user_id: str, entry_id: str) -> CbEntry:
        row = session.execute(
            select(CbEntry).where(CbEntry.user_id == user_id, CbEntry.id == entry_id)
        ).scalar_one_or_none()
        if row is None:
            raise EntryNotFoundError(f"No entry {entry_id!r} for user {user_id!r}")
        return row

    # ---- Subscription ----------------------------------------------------

    def subscribe(self, user_id: str, callback: SnapshotCallback) -> Unsubscribe:
        self._subscribers.setdefault(user_id, []).append(callback)
        callback(self.list_documents(user_id))

        def _unsubscribe() -> None:
            callbacks = self._subscribers.get(user_id, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return _unsubscribe

    def _notify(self, user_id: str) -> None:
        callbacks = list(self._subscribers.get(user_id, []))
        if not callbacks:
            return
        snapshot = self.list_documents(user_id)
        _logger.debug("storage:push user_id=%s entries=%d", user_id, len(snapshot))
        for cb in callbacks:
            # Writes are committed by now; subscriber errors are only logged.
            try:
                cb(list(snapshot))
            except Exception as e:  # noqa: BLE001
                _logger.error(
                    "storage:subscriber_failed user_id=%s error=%s", user_id, e.__class__.__name__
                )

    # ---- Writes ----------------------------------------------------------

    def create(self, user_id: str, payload: EntryPayload) -> str:
        entry_id = uuid.uuid4().hex
        with session_scope(database_url=self._database_url) as session:
            session.add(
                CbEntry(
                    id=entry_id,
                    user_id=user_id,
                    date=payload.date,
                    time=payload.time,
                    **_payload_columns(payload),
                )
            )
        _logger.info("storage:create user_id=%s entry_id=%s", user_id, entry_id)
        self._notify(user_id)
        return entry_id

    def update(self, user_id: str, entry_id: str, payload: EntryPayload) -> None:
        with session_scope(database_url=self._database_url) as session:
            self._get_row(session, user_id, entry_id)
            session.execute(
                update(CbEntry)
                .where(CbEntry.user_id == user_id, CbEntry.id == entry_id)
                .values(**_payload_columns(payload), updated_at=func.now())
            )
        _logger.info("storage:update user_id=%s entry_id=%s", user_id, entry_id)
        self._notify(user_id)

    def delete(self, user_id: str, entry_id: str) -> None:
        with session_scope(database_url=self._database_url) as session:
            self._get_row(session, user_id, entry_id)
            session.execute(
                delete(CbEntry).where(CbEntry.user_id == user_id, CbEntry.id == entry_id)
            )
        _logger.info("storage:delete user_id=%s entry_id=%s", user_id, entry_id)
        self._notify(user_id)


__all__ = [
    "EntryNotFoundError",
    "EntryStore",
    "SnapshotCallback",
    "SqlEntryStore",
    "Unsubscribe",
]
