import logging
import os
from collections.abc import Generator
from contextlib import contextmanager

import psycopg2

from timesheet_ledger.errors import StorageReadError, StorageWriteError


logger = logging.getLogger(__name__)


class PostgresClient:
    def __init__(self, database_url: str | None = None) -> None:
        self.database_url = database_url or os.environ.get("POSTGRES_URL")
        if not self.database_url:
            raise ValueError("POSTGRES_URL must be provided or set as an environment variable")
        self._initialize_database()

    @contextmanager
    def _get_connection(self) -> Generator[psycopg2.extensions.connection, None, None]:
        conn = psycopg2.connect(self.database_url)
        try:
            yield conn
        finally:
            conn.close()

    def _initialize_database(self) -> None:
        with self._get_connection() as connection:
            with connection.cursor() as cursor:
                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
                );
                """)

            connection.commit()

    def get(self, key: str) -> str | None:
        try:
            with self._get_connection() as connection, connection.cursor() as cursor:
                cursor.execute(
                    """
                    SELECT value
                    FROM kv_store
                    WHERE key = %s
                    """,
                    (key,),
                )
                result = cursor.fetchone()
                return result[0] if result else None
        except psycopg2.Error as e:
            logger.error(f"Error reading {key=}: {e}")
            raise StorageReadError(f"Failed to read {key}: {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with self._get_connection() as connection, connection.cursor() as cursor:
                cursor.execute(
                    """
                    INSERT INTO kv_store (key, value)
                    VALUES (%s, %s)
                    ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, updated_at = CURRENT_TIMESTAMP
                    """,
                    (key, value),
                )
                connection.commit()
        except psycopg2.Error as e:
            logger.error(f"Error writing {key=}: {e}")
            raise StorageWriteError(f"Failed to write {key}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            with self._get_connection() as connection, connection.cursor() as cursor:
                cursor.execute("DELETE FROM kv_store WHERE key = %s", (key,))
                connection.commit()
        except psycopg2.Error as e:
            logger.error(f"Error removing {key=}: {e}")
            raise StorageWriteError(f"Failed to remove {key}: {e}") from e
