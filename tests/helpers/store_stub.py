"""In-memory storage collaborator for engine tests.

Records every call so tests can assert that rejected submissions never reach
storage, and pushes full snapshots to subscribers after each write, the same
way the SQL store does.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from cashbook.models import EntryPayload


class RecordingStore:
    def __init__(self, *, fail_with: Exception | None = None) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.documents: dict[str, dict[str, Any]] = {}
        self.fail_with = fail_with
        self._subscribers: dict[str, list[Callable[[list[dict[str, Any]]], None]]] = {}
        self._next_id = 1

    # ---- helpers ---------------------------------------------------------

    def seed(self, document: dict[str, Any]) -> None:
        self.documents[document["id"]] = dict(document)

    def _push(self, user_id: str) -> None:
        snapshot = [dict(d) for d in self.documents.values()]
        for cb in list(self._subscribers.get(user_id, [])):
            cb(list(snapshot))

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    # ---- EntryStore ------------------------------------------------------

    def subscribe(self, user_id: str, callback):
        self._subscribers.setdefault(user_id, []).append(callback)
        callback([dict(d) for d in self.documents.values()])
        return lambda: self._subscribers[user_id].remove(callback)

    def create(self, user_id: str, payload: EntryPayload) -> str:
        self.calls.append(("create", user_id))
        self._maybe_fail()
        entry_id = f"e{self._next_id}"
        self._next_id += 1
        self.documents[entry_id] = {"id": entry_id, **payload.to_document()}
        self._push(user_id)
        return entry_id

    def update(self, user_id: str, entry_id: str, payload: EntryPayload) -> None:
        self.calls.append(("update", user_id, entry_id))
        self._maybe_fail()
        existing = self.documents[entry_id]
        self.documents[entry_id] = {**existing, **payload.to_document()}
        self._push(user_id)

    def delete(self, user_id: str, entry_id: str) -> None:
        self.calls.append(("delete", user_id, entry_id))
        self._maybe_fail()
        del self.documents[entry_id]
        self._push(user_id)
