"""
Base repository module with connection management and schema initialization.

Provides the foundation for all database operations in the Cashbox ledger.
A repository object is the store session: it is constructed explicitly with a
database path and handed to whatever needs the store.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterable, Optional, Union

from cashbox.config import DB_TIMEOUT, DB_TIMESTAMP_FORMAT, DEFAULT_DB_PATH
from cashbox.errors import StoreError, ValidationError
from cashbox.models.period import to_server_time

logger = logging.getLogger(__name__)


def to_db_timestamp(value: datetime) -> str:
    """Format a timestamp the way it is stored (server time, second precision)."""
    return to_server_time(value).strftime(DB_TIMESTAMP_FORMAT)


def from_db_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)


def parse_amount(value: Union[Decimal, int, float, str], allow_zero: bool = False) -> Decimal:
    """
    Parse a monetary amount into an exact Decimal.

    Raises:
        ValidationError: If the value is not a finite positive number
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid amount: {value!r}") from None

    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError(f"Amount must be positive, got {value}")
    return amount


def normalize_ids(ids: Iterable[int], name: str = "id") -> list[int]:
    """
    Validate a set of row identifiers, dropping duplicates (first occurrence wins).

    Raises:
        ValidationError: If the set is empty or contains a non-positive id
    """
    if ids is None or isinstance(ids, (str, bytes)):
        raise ValidationError(f"Provide a non-empty list of {name}s")

    normalized: list[int] = []
    for raw in ids:
        if isinstance(raw, bool):
            raise ValidationError(f"Invalid {name}: {raw!r}")
        try:
            value = int(raw)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid {name}: {raw!r}") from None
        if value <= 0:
            raise ValidationError(f"Invalid {name}: {raw!r}")
        if value not in normalized:
            normalized.append(value)

    if not normalized:
        raise ValidationError(f"Provide a non-empty list of {name}s")
    return normalized


def placeholders(count: int) -> str:
    """Bound-parameter list for an ``IN (...)`` membership filter."""
    return ", ".join("?" * count)


def check_text(value: Optional[str], field_name: str, max_length: int, required: bool = False) -> Optional[str]:
    """Strip and bound a free-text field."""
    if value is None:
        if required:
            raise ValidationError(f"{field_name} is required")
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {field_name}: {value!r}")

    value = value.strip()
    if not value:
        if required:
            raise ValidationError(f"{field_name} is required")
        return None
    if len(value) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return value


class BaseRepository:
    """
    Base repository class with SQLite connection management.

    Provides scoped connections, scoped transactions, schema initialization,
    and common database utilities for all repository classes.
    """

    def __init__(self, db_path: Optional[Path] = None, init_schema: bool = True):
        """
        Initialize the base repository.

        Args:
            db_path: Path to the SQLite database file. Defaults to data/cashbox.db
            init_schema: Whether to initialize the schema on startup
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self._ensure_db_directory()
        if init_schema:
            self._init_schema()

    def _ensure_db_directory(self):
        """Ensure the database directory exists."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Database directory ensured: {self.db_path.parent}")
        except Exception as e:
            logger.error(f"Failed to create database directory: {e}", exc_info=True)
            raise

    def _connect(self) -> sqlite3.Connection:
        # Autocommit mode: transactions are opened explicitly in transaction()
        conn = sqlite3.connect(self.db_path, timeout=DB_TIMEOUT, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _get_connection(self):
        """Context manager for reads and single-statement writes."""
        conn = None
        try:
            conn = self._connect()
            yield conn
        except sqlite3.OperationalError as e:
            logger.error(f"Database locked or operational error: {e}", exc_info=True)
            raise StoreError(f"Database error: {e}") from e
        except sqlite3.Error as e:
            logger.error(f"Database error: {e}", exc_info=True)
            raise StoreError(f"Database error: {e}") from e
        finally:
            if conn:
                conn.close()

    @contextmanager
    def transaction(self):
        """
        Scoped transaction over a single connection.

        Every statement issued on the yielded connection belongs to one
        atomic unit: it is committed when the block exits normally and
        rolled back on any exception. SQLite failures surface as StoreError.
        The write lock is taken at BEGIN, so concurrent units of work run one
        after another.
        """
        conn = None
        try:
            conn = self._connect()
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            self._rollback(conn)
            logger.error(f"Transaction rolled back: {e}", exc_info=True)
            raise StoreError(f"Database error: {e}") from e
        except Exception:
            self._rollback(conn)
            raise
        finally:
            if conn:
                conn.close()

    @staticmethod
    def _rollback(conn: Optional[sqlite3.Connection]):
        if conn is None or not conn.in_transaction:
            return
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            logger.warning(f"Rollback failed: {e}")

    def _init_schema(self):
        """Initialize the database schema for the cashbox ledger."""
        with self._get_connection() as conn:
            # Service catalog
            conn.execute("""
                CREATE TABLE IF NOT EXISTS services (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL UNIQUE CHECK(length(title) > 0),
                    description TEXT,
                    price TEXT NOT NULL,
                    is_available INTEGER NOT NULL DEFAULT 1 CHECK(is_available IN (0, 1)),
                    created_at TEXT NOT NULL
                )
            """)

            # Cashbox transactions
            conn.execute("""
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    patient TEXT,
                    specialist TEXT,
                    amount TEXT NOT NULL,
                    payment_method TEXT NOT NULL CHECK(length(payment_method) > 0),
                    comment TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            # Transaction <-> service links
            conn.execute("""
                CREATE TABLE IF NOT EXISTS transaction_services (
                    transaction_id INTEGER NOT NULL
                        REFERENCES transactions(id) ON DELETE CASCADE,
                    service_id INTEGER NOT NULL
                        REFERENCES services(id) ON DELETE RESTRICT,
                    PRIMARY KEY (transaction_id, service_id)
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS expense_categories (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE CHECK(length(name) > 0),
                    description TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS expenses (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    category TEXT NOT NULL CHECK(length(category) > 0),
                    amount TEXT NOT NULL,
                    description TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS appointments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    patient TEXT,
                    specialist TEXT,
                    service TEXT NOT NULL CHECK(length(service) > 0),
                    appointment_at TEXT NOT NULL,
                    status TEXT NOT NULL CHECK(length(status) > 0),
                    comment TEXT,
                    payment_type TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            self._create_indexes(conn)

            logger.debug("Cashbox schema initialized successfully")

    def _create_indexes(self, conn):
        """Create database indexes for query performance."""
        indexes = [
            ("idx_transactions_created_at", "transactions", "created_at"),
            ("idx_transaction_services_service_id", "transaction_services", "service_id"),
            ("idx_expenses_created_at", "expenses", "created_at"),
            ("idx_expenses_category", "expenses", "category"),
            ("idx_appointments_appointment_at", "appointments", "appointment_at"),
            ("idx_appointments_service", "appointments", "service"),
        ]

        for index_name, table, columns in indexes:
            conn.execute(f"""
                CREATE INDEX IF NOT EXISTS {index_name}
                ON {table}({columns})
            """)
