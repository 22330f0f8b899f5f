from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: cb_entries
# ---------------------------


class CbEntry(Base):
    __tablename__ = "cb_entries"

    # Opaque identifier assigned by the store at creation (uuid4 hex).
    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    # Every query is scoped to the owning user; there is no cross-user view.
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String(3), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    payment_mode: Mapped[str] = mapped_column(String, nullable=False)
    is_due: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    due_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    contact: Mapped[str | None] = mapped_column(Text, nullable=True)
    remark: Mapped[str | None] = mapped_column(Text, nullable=True)
    printer_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    pages: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Stamped once at creation as YYYY-MM-DD / HH:MM and never updated.
    date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("type in ('in','out')", name="ck_cb_entry_type"),
        CheckConstraint("amount >= 0", name="ck_cb_entry_amount"),
        CheckConstraint("pages >= 0", name="ck_cb_entry_pages"),
        CheckConstraint("type = 'in' OR pages = 0", name="ck_cb_entry_pages_in_only"),
        CheckConstraint("type = 'in' OR printer_name = ''", name="ck_cb_entry_printer_in_only"),
        CheckConstraint(
            "(is_due AND due_amount >= 1) OR (NOT is_due AND due_amount = 0)",
            name="ck_cb_entry_due_amount",
        ),
        Index("ix_cb_entries_user_id", "user_id"),
    )


__all__ = [
    "Base",
    "CbEntry",
]
