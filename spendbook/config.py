"""
Configuration module for Spendbook.

Contains constants, settings, and configuration values used throughout the application.
"""

import os
from pathlib import Path

# Version
VERSION = "0.1.0"

# Application paths
PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_LOG_DIR = PROJECT_ROOT / "logs"

# Database configuration
DB_FILENAME = "spendbook.db"
DB_TIMEOUT = 10.0  # seconds

# Storage backends
STORE_SQLITE = "sqlite"
STORE_MEMORY = "memory"
STORE_BACKENDS = [STORE_SQLITE, STORE_MEMORY]

# Amount constraints (decimal(10, 2))
MAX_AMOUNT_DIGITS = 10
MAX_AMOUNT_CENTS = 10**MAX_AMOUNT_DIGITS - 1

# User input limits
MAX_ACCOUNT_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

# Reporting
MONTH_LABEL_FORMAT = "{month} {year}"
MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
DEFAULT_RECENT_LIMIT = 5
DEFAULT_TRAILING_MONTHS = 6

# Export configuration
EXPORT_FORMATS = ["csv", "xlsx"]
EXPORT_FILENAME_PREFIX = "expenses"
CSV_DATE_FORMAT = "%Y-%m-%d"
CSV_HEADERS = [
    "Date",
    "Bank Account",
    "Expense Name",
    "Category",
    "Group",
    "Description",
    "Amount",
]

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "spendbook.log"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Error messages
ERROR_MESSAGES = {
    "database_error": "Database error occurred. Please try again later.",
    "validation_error": "Invalid input. Please check your values and try again.",
    "not_found": "The requested resource was not found.",
    "missing_reference": "Bank account or expense category does not exist.",
}


def get_data_dir() -> Path:
    """Get the configured data directory."""
    return Path(os.getenv("SPENDBOOK_DATA_DIR", DEFAULT_DATA_DIR))


def get_log_dir() -> Path:
    """Get the configured log directory."""
    return Path(os.getenv("SPENDBOOK_LOG_DIR", DEFAULT_LOG_DIR))


def get_db_path() -> Path:
    """Get the configured SQLite database path."""
    return Path(os.getenv("SPENDBOOK_DB_PATH", get_data_dir() / DB_FILENAME))


def get_store_backend() -> str:
    """Get the configured storage backend name."""
    backend = os.getenv("SPENDBOOK_STORE", STORE_SQLITE).strip().lower()
    if backend not in STORE_BACKENDS:
        raise ValueError(
            f"Unknown storage backend {backend!r}, expected one of {STORE_BACKENDS}"
        )
    return backend


def ensure_directories():
    """Ensure required directories exist."""
    get_data_dir().mkdir(parents=True, exist_ok=True)
    get_log_dir().mkdir(parents=True, exist_ok=True)


def get_log_level():
    """Get the configured log level."""
    import logging

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(os.getenv("LOG_LEVEL", LOG_LEVEL).upper(), logging.INFO)
