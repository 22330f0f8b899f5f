"""cashbook_db: storage library for the cashbook (SQLAlchemy).

Public exports
--------------
- ``Base`` and ``metadata`` for schema creation
- ORM models in ``cashbook_db.models.entries`` (re-exported for convenience)
- Engine/session helpers in ``cashbook_db.client``
"""

from __future__ import annotations

from .models.entries import Base, CbEntry

metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "CbEntry",
]
