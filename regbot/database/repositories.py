"""
Repository pattern implementation for database operations.

AI Assistant Notes:
- Clean separation of data access logic
- Type-safe operations with Pydantic model integration
- SQLiteRecordStore is the async record store the orchestrator writes to;
  blocking sqlite calls run in a worker thread
- Any persistence failure surfaces as RecordStoreError
"""

from regbot.utils import observe
from typing import List, Optional, Dict, Any
import asyncio
import logging
import sqlite3
from datetime import datetime

from pydantic import ValidationError

from .connection import DatabaseConnection
from .models import StoredRegistration
from regbot.exceptions import RecordStoreError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Base repository with common functionality."""

    def __init__(self, db: DatabaseConnection, table_name: str):
        """
        Initialize base repository.

        Args:
            db: Database connection instance
            table_name: Name of the database table
        """
        self.db = db
        self.table_name = table_name

    def _row_to_model(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert database row to model-compatible dictionary."""
        for key, value in row.items():
            if isinstance(value, str) and key.endswith('_at'):
                try:
                    row[key] = datetime.fromisoformat(value)
                except ValueError:
                    pass  # Keep original value if not a valid datetime

        return row


class RegistrationRepository(BaseRepository):
    """Repository for completed registrations."""

    def __init__(self, db: DatabaseConnection, table_name: str = "registrations"):
        super().__init__(db, table_name)

    def create(self, registration: StoredRegistration) -> int:
        """
        Persist a completed registration.

        Args:
            registration: Registration row to insert

        Returns:
            ID of the created row
        """
        query = f"""
        INSERT INTO {self.table_name} (
            user_id, name, date_of_birth, gender,
            uses_budget_app, budget_app_name, completed
        ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            registration.user_id,
            registration.name,
            registration.date_of_birth,
            registration.gender,
            registration.uses_budget_app,
            registration.budget_app_name if registration.uses_budget_app else None,
            registration.completed,
        )

        registration_id = self.db.execute_insert(query, params)
        logger.info(f"Saved registration {registration_id} for user {registration.user_id}")
        return registration_id

    def get_by_user_id(self, user_id: str) -> List[StoredRegistration]:
        """
        Get all registrations saved for a user, oldest first.

        Args:
            user_id: Caller-supplied user identifier

        Returns:
            List of stored registrations
        """
        query = f"""
        SELECT * FROM {self.table_name}
        WHERE user_id = ?
        ORDER BY id ASC
        """
        rows = self.db.execute_query(query, (user_id,))
        return [StoredRegistration(**self._row_to_model(row)) for row in rows]

    def count(self) -> int:
        """Count stored registrations."""
        result = self.db.execute_query(
            f"SELECT COUNT(*) AS total FROM {self.table_name}")
        return result[0]['total'] if result else 0


class SQLiteRecordStore:
    """
    Record store backed by SQLite repositories.

    Only tables with a registered repository can be written to.
    """

    def __init__(self, db: DatabaseConnection, registrations_table: str = "registrations"):
        """
        Initialize the record store.

        Args:
            db: Database connection instance
            registrations_table: Table receiving completed registrations
        """
        self.db = db
        self.registrations = RegistrationRepository(db, registrations_table)
        self._repositories = {registrations_table: self.registrations}

    @observe(name="record_store_insert", as_type="span")
    async def insert(self, table: str, record: Dict[str, Any]) -> int:
        """
        Insert a record into a table.

        Args:
            table: Target table name
            record: Column values

        Returns:
            ID of the inserted row

        Raises:
            RecordStoreError: If the table is unknown or the insert fails
        """
        repository = self._repositories.get(table)
        if repository is None:
            raise RecordStoreError(f"Unknown table: {table}", {'table': table})

        try:
            registration = StoredRegistration(**record)
            return await asyncio.to_thread(repository.create, registration)
        except (ValidationError, sqlite3.Error) as e:
            logger.error(f"Failed to insert into {table}: {e}")
            raise RecordStoreError(
                "Failed to save registration",
                {'table': table, 'user_id': record.get('user_id')}
            ) from e

    async def get_registrations(self, user_id: str) -> List[StoredRegistration]:
        """Get every stored registration for a user."""
        return await asyncio.to_thread(self.registrations.get_by_user_id, user_id)

    def table_names(self) -> List[str]:
        """List writable tables."""
        return list(self._repositories)

    def health_check(self) -> Optional[int]:
        """Return the registration count, or None when the database is unreachable."""
        try:
            return self.registrations.count()
        except sqlite3.Error as e:
            logger.warning(f"Record store health check failed: {e}")
            return None
