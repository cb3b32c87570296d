import logging
import os
from pathlib import Path
from typing import TypedDict

import uvicorn
from dotenv import load_dotenv

from timesheet_ledger.api.main import create_app
from timesheet_ledger.db.base import KeyValueStorage
from timesheet_ledger.db.postgres_client import PostgresClient
from timesheet_ledger.db.sqlite_client import SQLiteClient
from timesheet_ledger.entries.store import EntryStore
from timesheet_ledger.logging_config.logging_config import setup_logging


class AppConfig(TypedDict):
    """Configuration for the application"""

    LEDGER_DATA_DIR: str
    LOG_DIR: str
    POSTGRES_URL: str | None
    API_HOST: str
    API_PORT: int


def load_config() -> AppConfig:
    """Load configuration from environment variables"""
    load_dotenv()

    port = os.getenv("API_PORT", "8000")
    if not port.isdigit():
        raise OSError(f"API_PORT must be an integer, got {port!r}")

    return {
        "LEDGER_DATA_DIR": os.getenv("LEDGER_DATA_DIR", "/data"),
        "LOG_DIR": os.getenv("LOG_DIR", "/data/logs"),
        "POSTGRES_URL": os.getenv("POSTGRES_URL"),
        "API_HOST": os.getenv("API_HOST", "0.0.0.0"),
        "API_PORT": int(port),
    }


def build_storage(config: AppConfig) -> KeyValueStorage:
    if config["POSTGRES_URL"]:
        return PostgresClient(config["POSTGRES_URL"])
    return SQLiteClient(Path(config["LEDGER_DATA_DIR"]))


# ruff: noqa: D103
def main() -> None:
    config = load_config()
    setup_logging(log_dir=Path(config["LOG_DIR"]))
    logger = logging.getLogger(__name__)
    logger.info("Starting Timesheet Ledger")

    store = EntryStore(build_storage(config))
    loaded = store.load()
    for warning in loaded.warnings:
        logger.warning(f"Started with fallback data: {warning}")

    app = create_app(store)
    uvicorn.run(app, host=config["API_HOST"], port=config["API_PORT"])


if __name__ == "__main__":
    main()
