"""
Configuration module for Cashbox.

Contains constants, settings, and configuration values used throughout the application.
"""

import os
from pathlib import Path

# Version
VERSION = "0.1.0"

# Application paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOG_DIR = PROJECT_ROOT / "logs"

# Database configuration
DEFAULT_DB_PATH = Path(os.getenv("CASHBOX_DB_PATH", str(DATA_DIR / "cashbox.db")))
DB_TIMEOUT = 10.0  # seconds
DB_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Ledger validation
MAX_PAYMENT_METHOD_LENGTH = 50
MAX_REFERENCE_LENGTH = 100  # patient / specialist references
MAX_COMMENT_LENGTH = 500
MAX_TITLE_LENGTH = 100

# Reports
DEFAULT_REPORT_WINDOW_DAYS = 30
REPORT_SEQUENCE_PREFIX = "R"

# Discord configuration
DISCORD_MESSAGE_MAX_LENGTH = 2000
DEFAULT_LIST_LIMIT = 10
MAX_LIST_LIMIT = 25

# Export configuration
EXPORT_FORMATS = ["xlsx", "csv"]

# Chart generation
CHART_DPI = 150
CHART_FORMAT = "png"
CHART_WIDTH = 12
CHART_HEIGHT = 6

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "cashbox_bot.log"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# User-facing messages keyed by error kind
ERROR_MESSAGES = {
    "validation": "Invalid input. Please check your values and try again.",
    "invalid_period": "Invalid period. Must be one of daily, weekly, monthly, yearly.",
    "missing_date_range": "Please provide both a start date and an end date.",
    "not_found": "The requested resource was not found.",
    "store": "Database error occurred. Please try again later.",
    "internal_error": "An internal error occurred. Please try again.",
}


def ensure_directories():
    """Ensure required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)


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
    return level_map.get(LOG_LEVEL.upper(), logging.INFO)
