"""DB helpers for tests: bootstrap a temporary SQLite store."""

from __future__ import annotations

from pathlib import Path

from cashbook_db.client import create_schema


def bootstrap_sqlite_db(db_file: Path) -> str:
    """Create a SQLite database file with the cashbook schema and return its URL.

    A file-backed database lets every SQLAlchemy connection share state
    (in-memory SQLite databases are per-connection).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    create_schema(database_url=url)
    return url
