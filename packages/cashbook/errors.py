"""Error types raised by the cashbook engine and its collaborators.

There is no fatal error class: every failure leaves the current snapshot and
form state untouched so the user can retry.
"""

from __future__ import annotations


class CashbookError(Exception):
    """Base class for cashbook errors."""


class EntryValidationError(CashbookError, ValueError):
    """A required form field is missing or out of range.

    ``field`` names the offending form field (``"user"`` for a missing
    session context). Raised before any storage call is attempted.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class CollaboratorError(CashbookError, RuntimeError):
    """A storage or suggestion call failed."""


__all__ = ["CashbookError", "CollaboratorError", "EntryValidationError"]
