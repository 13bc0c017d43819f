"""
Queries repository module for report inputs.

Read-only queries that feed the report service:
- Expenses in an optional date range
- Appointments in an optional date range
- Cashbox (transaction, service) rows in an optional date range

Bucketing and summing happen in the report service; these queries only
filter by time with bound parameters.
"""

import logging
from datetime import datetime
from typing import Optional

from cashbox.errors import ValidationError

from .appointments import APPOINTMENT_COLUMNS
from .base import BaseRepository, to_db_timestamp
from .expenses import EXPENSE_COLUMNS
from .models import Appointment, CashboxRow, Expense

logger = logging.getLogger(__name__)


def _range_clause(
    column: str, start: Optional[datetime], end: Optional[datetime]
) -> tuple[str, list]:
    """Build an inclusive ``BETWEEN`` filter, or nothing when unbounded."""
    if start is None and end is None:
        return "", []
    if start is None or end is None:
        raise ValidationError("Both start and end are required for a date range")
    if start > end:
        raise ValidationError("Start date must not be after end date")
    return (
        f" WHERE {column} BETWEEN ? AND ?",
        [to_db_timestamp(start), to_db_timestamp(end)],
    )


class QueryRepository(BaseRepository):
    """
    Repository for report input queries.

    Provides read-only query operations over expenses, appointments and the
    cashbox ledger.
    """

    def __init__(self, db_path=None, init_schema: bool = False):
        """
        Initialize the query repository.

        Args:
            db_path: Path to the SQLite database file
            init_schema: Whether to initialize schema
        """
        super().__init__(db_path, init_schema=init_schema)

    def get_expenses(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Expense]:
        """
        Get expenses in an inclusive range, most recent first.

        Args:
            start: Range start (None together with end for all expenses)
            end: Range end

        Returns:
            List of Expense objects
        """
        where, params = _range_clause("created_at", start, end)

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"SELECT {EXPENSE_COLUMNS} FROM expenses{where} "
                "ORDER BY created_at DESC, id DESC",
                params,
            )
            expenses = [Expense.from_row(row) for row in cursor.fetchall()]

        logger.debug(f"Loaded {len(expenses)} expenses between {start} and {end}")
        return expenses

    def get_appointments(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Appointment]:
        """Get appointments in an inclusive range, most recent first."""
        where, params = _range_clause("appointment_at", start, end)

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"SELECT {APPOINTMENT_COLUMNS} FROM appointments{where} "
                "ORDER BY appointment_at DESC, id DESC",
                params,
            )
            appointments = [Appointment.from_row(row) for row in cursor.fetchall()]

        logger.debug(
            f"Loaded {len(appointments)} appointments between {start} and {end}"
        )
        return appointments

    def get_cashbox_rows(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[CashboxRow]:
        """
        Get one row per (transaction, linked service) pair in a range.

        A transaction linked to N services yields N rows, each with the full
        transaction amount.
        """
        where, params = _range_clause("t.created_at", start, end)

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT
                    t.id AS transaction_id,
                    s.id AS service_id,
                    s.title AS service_title,
                    t.amount,
                    t.payment_method,
                    t.created_at
                FROM transactions t
                JOIN transaction_services ts ON ts.transaction_id = t.id
                JOIN services s ON s.id = ts.service_id
                {where}
                ORDER BY t.created_at DESC, t.id DESC, s.id
                """,
                params,
            )
            rows = [CashboxRow.from_row(row) for row in cursor.fetchall()]

        logger.debug(f"Loaded {len(rows)} cashbox rows between {start} and {end}")
        return rows
