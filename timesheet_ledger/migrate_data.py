import logging

from timesheet_ledger.db.base import KeyValueStorage
from timesheet_ledger.db.postgres_client import PostgresClient
from timesheet_ledger.db.sqlite_client import SQLiteClient
from timesheet_ledger.entries.models import ENTRIES_KEY, SETTINGS_KEY


logger = logging.getLogger("storage_migration")


def migrate_storage(source: KeyValueStorage, target: KeyValueStorage) -> list[str]:
    """
    Copy the stored entries and settings from one storage to another.

    Args:
        source: Storage to read from
        target: Storage to write to

    Returns:
        The keys that were copied
    """
    copied = []
    for key in (ENTRIES_KEY, SETTINGS_KEY):
        value = source.get(key)
        if value is None:
            logger.info(f"Nothing stored under {key}, skipping")
            continue
        target.set(key, value)
        copied.append(key)
        logger.info(f"Migrated {key} ({len(value)} bytes)")
    return copied


def migrate_sqlite_to_postgres() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting migration from SQLite to PostgreSQL")

    try:
        migrate_storage(SQLiteClient(), PostgresClient())
        logger.info("Migration completed successfully")
    except Exception:
        logger.exception("Migration failed")
        raise


if __name__ == "__main__":
    migrate_sqlite_to_postgres()
