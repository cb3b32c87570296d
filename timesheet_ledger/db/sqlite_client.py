import logging
import os
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from timesheet_ledger.errors import StorageReadError, StorageWriteError


logger = logging.getLogger(__name__)


class SQLiteClient:
    def __init__(self, data_dir_path: Path | None = None) -> None:
        self.data_dir_path = data_dir_path or Path(os.getenv("LEDGER_DATA_DIR", "/data"))
        self.database_dir_path = self.data_dir_path / "db"
        self.database_path = self.database_dir_path / "timesheet-ledger.db"
        self._ensure_directory()
        self._initialize_database()

    def _ensure_directory(self) -> None:
        """Ensure all required directories exist"""
        os.makedirs(self.database_dir_path, exist_ok=True)

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self.database_path)
        try:
            yield conn
        finally:
            conn.close()

    def _initialize_database(self) -> None:
        with self._get_connection() as connection:
            connection.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            );
            """)
            connection.commit()

    def get(self, key: str) -> str | None:
        try:
            with self._get_connection() as connection:
                cursor = connection.execute(
                    """
                    SELECT value
                    FROM kv_store
                    WHERE key = ?
                    """,
                    (key,),
                )
                result = cursor.fetchone()
                return result[0] if result else None
        except sqlite3.Error as e:
            logger.error(f"Error reading {key=}: {e}")
            raise StorageReadError(f"Failed to read {key}: {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with self._get_connection() as connection:
                connection.execute(
                    """
                    INSERT INTO kv_store (key, value)
                    VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
                    """,
                    (key, value),
                )
                connection.commit()
        except sqlite3.Error as e:
            logger.error(f"Error writing {key=}: {e}")
            raise StorageWriteError(f"Failed to write {key}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            with self._get_connection() as connection:
                connection.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                connection.commit()
        except sqlite3.Error as e:
            logger.error(f"Error removing {key=}: {e}")
            raise StorageWriteError(f"Failed to remove {key}: {e}") from e
