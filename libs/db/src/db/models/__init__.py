"""Shared SQLAlchemy models registry for the workspace database.

Currently holds the key-value settings table used by ``sheet_ledger``.
"""

from .settings import Base, SlSetting

__all__ = [
    "Base",
    "SlSetting",
]
