"""
Storage module for persistent fee market data.

Provides database abstraction for the params and state slots.
Uses SQLite for simplicity and correctness.
"""

from .database import Database
from .namespaces import FEEMARKET, FeeMarketNamespace
from .sqlite import SQLiteDatabase

__all__ = [
    "Database",
    "SQLiteDatabase",
    "FeeMarketNamespace",
    "FEEMARKET",
]
