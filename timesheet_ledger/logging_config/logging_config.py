import logging
import logging.handlers
import os
from pathlib import Path


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(app_name: str = "timesheet-ledger", log_dir: Path | None = None) -> None:
    """Configure application logging

    Args:
        app_name: Name to use for log files
        log_dir: Directory for log files, defaults to LOG_DIR or /data/logs

    """
    log_dir = Path(log_dir or os.getenv("LOG_DIR", "/data/logs"))
    os.makedirs(log_dir, exist_ok=True)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    # Drop handlers from an earlier call so records are not written twice
    for handler in list(root_logger.handlers):
        if getattr(handler, "_timesheet_ledger", False):
            root_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    # File handler with rotation
    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{app_name}.log",
        maxBytes=10_000_000,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    # Add error file handler for ERROR and above
    error_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{app_name}-error.log",
        maxBytes=10_000_000,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    for handler in (console_handler, file_handler, error_handler):
        handler._timesheet_ledger = True
        root_logger.addHandler(handler)
