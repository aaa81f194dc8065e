"""
Database module for RaastaFix
Key-value persistence of reports, users and the session user.
"""

from .connection import DatabaseConnection
from .models import Base, StoreEntry
from .store import KeyValueStore, create_store
from .repository import CivicRepository

__all__ = [
    "DatabaseConnection",
    "Base",
    "StoreEntry",
    "KeyValueStore",
    "create_store",
    "CivicRepository",
]
