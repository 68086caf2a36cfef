"""
Database package for the registration chatbot.

This package provides SQLite storage for completed registrations.

AI Assistant Notes:
- Plain sqlite3 with thread-local connections
- Migration system for schema versioning
- Repository pattern for clean data access
- SQLiteRecordStore is the record store handed to the orchestrator
"""

from .connection import DatabaseConnection
from .models import (
    Gender,
    RegistrationFields,
    RegistrationRecord,
    RegistrationStep,
    StoredRegistration,
)
from .repositories import RegistrationRepository, SQLiteRecordStore
from .migrations import DatabaseMigrations

__all__ = [
    "DatabaseConnection",
    "Gender",
    "RegistrationFields",
    "RegistrationRecord",
    "RegistrationStep",
    "StoredRegistration",
    "RegistrationRepository",
    "SQLiteRecordStore",
    "DatabaseMigrations",
]
