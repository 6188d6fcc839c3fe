"""
Database package for the objection service
"""

from .models import (
    Base,
    Farmer,
    Objection,
    PasswordReset,
    STATUS_PENDING,
    STATUS_REVIEWED,
    STATUS_RESOLVED,
    ACTIVE_STATUSES,
)
from .connection import Storage, create_db_engine
from .bootstrap import init_database, create_schema, wait_for_database

__all__ = [
    "Base",
    "Farmer",
    "Objection",
    "PasswordReset",
    "STATUS_PENDING",
    "STATUS_REVIEWED",
    "STATUS_RESOLVED",
    "ACTIVE_STATUSES",
    "Storage",
    "create_db_engine",
    "init_database",
    "create_schema",
    "wait_for_database",
]
