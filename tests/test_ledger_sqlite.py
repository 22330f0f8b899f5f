from datetime import datetime
from pathlib import Path

import pytest

from cashbook.categories import PRINTER_OPTIONS
from cashbook.errors import CollaboratorError, EntryValidationError
from cashbook.ledger import LedgerSession
from cashbook.storage import EntryNotFoundError, SqlEntryStore
from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture
def store(tmp_path: Path) -> SqlEntryStore:
    url = bootstrap_sqlite_db(tmp_path / "cashbook.sqlite3")
    return SqlEntryStore(database_url=url)


def _session(store: SqlEntryStore, user_id: str = "u1", when=datetime(2024, 5, 1, 9, 30)):
    return LedgerSession(store, user_id=user_id, clock=lambda: when)


def _add(session: LedgerSession, **fields: str | bool) -> None:
    for name, value in fields.items():
        session.set_field(name, value)
    session.submit()


def test_create_edit_delete_round_trip(store: SqlEntryStore):
    with _session(store) as session:
        _add(session, amount="300", pages="12", contact="Rahim")

        view = session.view()
        assert view.total_count == 1
        (rec,) = view.records
        assert rec.amount == 300
        assert rec.date == "2024-05-01"
        assert rec.time == "09:30"
        assert view.totals.total_in == 300
        assert view.totals.device_pages[PRINTER_OPTIONS[0]] == 12

        session.start_edit(rec.id)
        session.set_field("amount", "350")
        session.submit()

        (edited,) = session.view().records
        assert edited.id == rec.id
        assert edited.amount == 350
        assert edited.date == "2024-05-01"
        assert edited.time == "09:30"
        assert edited.updated_at is not None
        assert session.form_state.editing_id is None

        session.delete(rec.id)
        assert session.view().records == ()


def test_snapshots_are_newest_first_and_filtered(store: SqlEntryStore):
    with _session(store, when=datetime(2024, 1, 1, 8, 0)) as early:
        _add(early, amount="100", pages="1", contact="Old")
    with _session(store, when=datetime(2024, 2, 1, 8, 0)) as late:
        _add(late, type="out", amount="40", category="Food")
        late.set_filter("type", "out")

        view = late.view()
        assert [r.contact or "" for r in late.ledger.records] == ["", "Old"]
        assert [r.type for r in view.records] == ["out"]
        assert view.totals.balance == 60


def test_entries_are_scoped_per_user(store: SqlEntryStore):
    with _session(store, "u1") as s1:
        _add(s1, amount="10", pages="1")
    with _session(store, "u2") as s2:
        assert s2.view().total_count == 0
    assert len(store.list_documents("u1")) == 1


def test_unsubscribed_session_stops_receiving_pushes(store: SqlEntryStore):
    watcher = _session(store)
    watcher.start()
    watcher.close()
    with _session(store) as writer:
        _add(writer, amount="5", pages="1")
    assert watcher.view().total_count == 0


def test_unknown_entries(store: SqlEntryStore):
    with _session(store) as session:
        with pytest.raises(LookupError):
            session.start_edit("missing")
        with pytest.raises(CollaboratorError, match="Failed to delete transaction"):
            session.delete("missing")
    with pytest.raises(EntryNotFoundError):
        store.get_document("u1", "missing")


def test_session_without_user_cannot_delete(store: SqlEntryStore):
    session = LedgerSession(store, user_id=None)
    session.start()
    with pytest.raises(EntryValidationError) as ei:
        session.delete("anything")
    assert ei.value.field == "user"


def test_failing_subscriber_does_not_fail_the_write(store: SqlEntryStore):
    pushes: list[int] = []

    def flaky(snapshot):
        pushes.append(len(snapshot))
        if len(pushes) > 1:
            raise RuntimeError("render failed")

    store.subscribe("u1", flaky)
    with _session(store) as session:
        _add(session, amount="20", pages="2")
        assert session.view().total_count == 1
    assert pushes == [0, 1]
    assert len(store.list_documents("u1")) == 1
