"""Pytest configuration for test isolation.

Commands and the storage client read configuration from the environment
(``DATABASE_URL``, ``CASHBOOK_USER_ID``, ``OPENAI_API_KEY``). A developer's
shell or ``.env`` must not leak into tests, so those variables are cleared for
every test. Cached SQLAlchemy engines are disposed afterwards so each test's
temporary SQLite file is released.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from cashbook_db.client import dispose_engines

_ENV_VARS = (
    "DATABASE_URL",
    "CASHBOOK_USER_ID",
    "CASHBOOK_SUGGEST_MODEL",
    "CASHBOOK_LOG_LEVEL",
    "OPENAI_API_KEY",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    dispose_engines()
