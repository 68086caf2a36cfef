"""
Database migration management for the registration chatbot.

AI Assistant Notes:
- Version-controlled schema changes defined in code
- Automatic detection of pending migrations
- Migration history tracked in schema_migrations
"""

from typing import List, Dict, Any
import logging

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


class DatabaseMigrations:
    """
    Manages database schema migrations with version tracking.
    """

    def __init__(self, db_connection: DatabaseConnection):
        """
        Initialize migration manager.

        Args:
            db_connection: Database connection instance
        """
        self.db = db_connection

    def _ensure_migrations_table(self) -> None:
        """Create migrations tracking table if it doesn't exist."""
        if not self.db.table_exists("schema_migrations"):
            migration_sql = """
            CREATE TABLE schema_migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                version INTEGER NOT NULL UNIQUE,
                name TEXT NOT NULL,
                executed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
            """
            self.db.execute_script(migration_sql)
            logger.info("Created migrations tracking table")

    def _get_applied_migrations(self) -> List[int]:
        """Get list of applied migration versions."""
        if not self.db.table_exists("schema_migrations"):
            return []

        query = "SELECT version FROM schema_migrations ORDER BY version"
        result = self.db.execute_query(query)
        return [row['version'] for row in result]

    def get_pending_migrations(self) -> List[Dict[str, Any]]:
        """
        Get list of pending migrations that need to be applied.

        Returns:
            List of migration dictionaries with version, name, and sql
        """
        self._ensure_migrations_table()
        applied_versions = set(self._get_applied_migrations())

        all_migrations = [
            {
                "version": 1,
                "name": "initial_schema",
                "sql": self._get_initial_schema_sql()
            },
            {
                "version": 2,
                "name": "add_indexes",
                "sql": self._get_indexes_sql()
            },
        ]

        return [
            migration for migration in all_migrations
            if migration["version"] not in applied_versions
        ]

    def run_migrations(self) -> None:
        """Run all pending migrations."""
        pending = self.get_pending_migrations()

        if not pending:
            logger.info("No pending migrations to apply")
            return

        logger.info(f"Applying {len(pending)} migrations")

        for migration in pending:
            try:
                # executescript commits on its own, so record the version after it
                self.db.execute_script(migration["sql"])
                with self.db.get_cursor() as cursor:
                    cursor.execute(
                        "INSERT INTO schema_migrations (version, name) VALUES (?, ?)",
                        (migration["version"], migration["name"])
                    )

                logger.info(f"Applied migration {migration['version']}: {migration['name']}")

            except Exception as e:
                logger.error(f"Migration {migration['version']} failed: {e}")
                raise

        logger.info("All migrations applied successfully")

    def _get_initial_schema_sql(self) -> str:
        """Get SQL for initial database schema."""
        return """
        -- Completed registrations
        CREATE TABLE IF NOT EXISTS registrations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            name TEXT NOT NULL,
            date_of_birth TEXT NOT NULL,
            gender TEXT NOT NULL CHECK (gender IN ('male', 'female', 'other')),
            uses_budget_app BOOLEAN NOT NULL,
            budget_app_name TEXT,
            completed BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """

    def _get_indexes_sql(self) -> str:
        """Get SQL for performance indexes."""
        return """
        CREATE INDEX IF NOT EXISTS idx_registrations_user ON registrations(user_id);
        CREATE INDEX IF NOT EXISTS idx_registrations_created ON registrations(created_at);
        """
