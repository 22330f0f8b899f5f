"""ORM models registry for the cashbook store."""

from .entries import Base, CbEntry

__all__ = [
    "Base",
    "CbEntry",
]
