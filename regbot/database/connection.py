"""
Database connection management for SQLite.

AI Assistant Notes:
- Thread-local SQLite connections; record store calls run in worker threads
- Handles database file creation and connection pragmas
- Provides context managers for safe database operations
"""

import sqlite3
import threading
from pathlib import Path
from typing import Optional, Generator
from contextlib import contextmanager
import logging

from regbot.config import settings

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    Manages SQLite database connections with thread-local storage.

    Each thread, including asyncio.to_thread workers, gets its own connection.
    Every connection is tracked so shutdown can close them all.
    """

    def __init__(self, database_path: Optional[str] = None):
        """
        Initialize database connection manager.

        Args:
            database_path: Path to SQLite database file. If None, uses config.
        """
        self.database_path = Path(database_path or settings.database_path)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

        self._local = threading.local()
        self._connections = []
        self._connections_lock = threading.Lock()

        self.timeout = settings.database_timeout

        logger.info(f"Database connection initialized: {self.database_path}")

    def _create_connection(self) -> sqlite3.Connection:
        """Create a new SQLite connection with proper settings."""
        conn = sqlite3.connect(
            self.database_path,
            timeout=self.timeout,
            check_same_thread=False  # Closed from the shutdown thread
        )

        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = NORMAL")

        # Set row factory to return dict-like rows
        conn.row_factory = sqlite3.Row

        return conn

    def get_connection(self) -> sqlite3.Connection:
        """
        Get a thread-local database connection.
        Creates new connection if needed for current thread.
        """
        if getattr(self._local, 'connection', None) is None:
            self._local.connection = self._create_connection()
            with self._connections_lock:
                self._connections.append(self._local.connection)
            logger.debug(f"Created new database connection for thread {threading.get_ident()}")

        return self._local.connection

    @contextmanager
    def get_cursor(self) -> Generator[sqlite3.Cursor, None, None]:
        """
        Context manager for database cursor operations.
        Automatically commits or rolls back transactions.
        """
        conn = self.get_connection()
        cursor = conn.cursor()

        try:
            yield cursor
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Database operation failed: {e}")
            raise
        finally:
            cursor.close()

    def execute_script(self, script: str) -> None:
        """
        Execute a SQL script (useful for migrations).

        Args:
            script: SQL script to execute
        """
        conn = self.get_connection()
        try:
            conn.executescript(script)
            conn.commit()
            logger.info("SQL script executed successfully")
        except Exception as e:
            conn.rollback()
            logger.error(f"SQL script execution failed: {e}")
            raise

    def execute_query(self, query: str, params: tuple = ()) -> list:
        """
        Execute a SELECT query and return results.

        Args:
            query: SQL query to execute
            params: Query parameters

        Returns:
            List of rows as dictionaries
        """
        with self.get_cursor() as cursor:
            cursor.execute(query, params)
            return [dict(row) for row in cursor.fetchall()]

    def execute_insert(self, query: str, params: tuple = ()) -> int:
        """
        Execute an INSERT query and return the last row ID.

        Args:
            query: SQL INSERT query
            params: Query parameters

        Returns:
            ID of the inserted row
        """
        with self.get_cursor() as cursor:
            cursor.execute(query, params)
            return cursor.lastrowid

    def table_exists(self, table_name: str) -> bool:
        """
        Check if a table exists in the database.

        Args:
            table_name: Name of the table to check

        Returns:
            True if table exists, False otherwise
        """
        query = """
        SELECT name FROM sqlite_master
        WHERE type='table' AND name=?
        """
        result = self.execute_query(query, (table_name,))
        return len(result) > 0

    def close_all_connections(self) -> None:
        """Close every connection opened by this manager (useful for shutdown)."""
        with self._connections_lock:
            for conn in self._connections:
                conn.close()
            self._connections = []
        self._local = threading.local()
        logger.info("Database connections closed")
