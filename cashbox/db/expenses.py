"""
Expenses repository module.

Handles operating expenses and the expense category list. Expenses are the
input of the expense reports, which break every period down by category.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

from cashbox.config import MAX_COMMENT_LENGTH, MAX_TITLE_LENGTH
from cashbox.errors import ValidationError

from .base import (
    BaseRepository,
    check_text,
    normalize_ids,
    parse_amount,
    placeholders,
    to_db_timestamp,
)
from .models import Expense, ExpenseCategory

logger = logging.getLogger(__name__)

EXPENSE_COLUMNS = "id, category, amount, description, created_at"


class ExpenseRepository(BaseRepository):
    """
    Repository for expenses and expense categories.

    Categories are a picklist; expenses store the category name itself so
    renaming or deleting a category never rewrites historical expenses.
    """

    def __init__(self, db_path=None, init_schema: bool = False):
        """
        Initialize the expense repository.

        Args:
            db_path: Path to the SQLite database file
            init_schema: Whether to initialize schema
        """
        super().__init__(db_path, init_schema=init_schema)

    # =========================================================================
    # Expense Operations
    # =========================================================================

    def add_expense(
        self,
        category: str,
        amount: Union[Decimal, int, float, str],
        description: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Expense:
        """
        Record an expense.

        Args:
            category: Expense category name
            amount: Expense amount (must be positive)
            description: Optional description
            created_at: Timestamp override (defaults to now)

        Returns:
            The created Expense
        """
        category = check_text(category, "category", MAX_TITLE_LENGTH, required=True)
        amount = parse_amount(amount)
        description = check_text(description, "description", MAX_COMMENT_LENGTH)
        if created_at is None:
            created_at = datetime.now()
        stored_at = to_db_timestamp(created_at)

        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO expenses (category, amount, description, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (category, str(amount), description, stored_at),
            )
            expense_id = cursor.lastrowid

        logger.info(f"Added expense {expense_id}: {amount} for {category}")
        return Expense(
            id=expense_id,
            category=category,
            amount=amount,
            description=description,
            created_at=datetime.fromisoformat(stored_at),
        )

    def get_expense(self, expense_id: int) -> Optional[Expense]:
        """Get an expense by ID."""
        if not isinstance(expense_id, int) or expense_id <= 0:
            raise ValidationError(f"Invalid expense_id: {expense_id!r}")

        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT {EXPENSE_COLUMNS} FROM expenses WHERE id = ?",
                (expense_id,),
            ).fetchone()
            return Expense.from_row(row) if row else None

    def list_expenses(self, limit: Optional[int] = None) -> list[Expense]:
        """List expenses, most recent first."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT {EXPENSE_COLUMNS} FROM expenses
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (-1 if limit is None else limit,),
            )
            return [Expense.from_row(row) for row in cursor.fetchall()]

    def update_expense(
        self,
        expense_id: int,
        category: Optional[str] = None,
        amount: Optional[Union[Decimal, int, float, str]] = None,
        description: Optional[str] = None,
    ) -> Optional[Expense]:
        """
        Update an expense. Fields left as None keep their current value.

        Returns:
            Updated Expense, or None if not found
        """
        if not isinstance(expense_id, int) or expense_id <= 0:
            raise ValidationError(f"Invalid expense_id: {expense_id!r}")

        updates = []
        params: list = []
        if category is not None:
            updates.append("category = ?")
            params.append(
                check_text(category, "category", MAX_TITLE_LENGTH, required=True)
            )
        if amount is not None:
            updates.append("amount = ?")
            params.append(str(parse_amount(amount)))
        if description is not None:
            updates.append("description = ?")
            params.append(check_text(description, "description", MAX_COMMENT_LENGTH))

        if updates:
            params.append(expense_id)
            with self._get_connection() as conn:
                cursor = conn.execute(
                    f"UPDATE expenses SET {', '.join(updates)} WHERE id = ?", params
                )
                if cursor.rowcount == 0:
                    logger.warning(f"Expense {expense_id} not found for update")
                    return None
            logger.info(f"Updated expense {expense_id}")

        return self.get_expense(expense_id)

    def delete_expenses(self, expense_ids: Iterable[int]) -> int:
        """Delete expenses by ID. Returns the number deleted."""
        expense_ids = normalize_ids(expense_ids, "expense id")

        with self.transaction() as conn:
            cursor = conn.execute(
                f"DELETE FROM expenses WHERE id IN ({placeholders(len(expense_ids))})",
                expense_ids,
            )
            deleted = cursor.rowcount

        logger.info(f"Deleted {deleted} expenses")
        return deleted

    # =========================================================================
    # Category Operations
    # =========================================================================

    def add_category(
        self, name: str, description: Optional[str] = None
    ) -> ExpenseCategory:
        """Add an expense category. Names are unique."""
        name = check_text(name, "name", MAX_TITLE_LENGTH, required=True)
        description = check_text(description, "description", MAX_COMMENT_LENGTH)
        created_at = datetime.now().replace(microsecond=0)

        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO expense_categories (name, description, created_at)
                VALUES (?, ?, ?)
                """,
                (name, description, to_db_timestamp(created_at)),
            )
            category_id = cursor.lastrowid

        logger.info(f"Added expense category {category_id}: {name}")
        return ExpenseCategory(
            id=category_id, name=name, description=description, created_at=created_at
        )

    def list_categories(self) -> list[ExpenseCategory]:
        """List expense categories ordered by name."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT id, name, description, created_at
                FROM expense_categories
                ORDER BY name COLLATE NOCASE
                """
            )
            return [ExpenseCategory.from_row(row) for row in cursor.fetchall()]

    def delete_categories(self, category_ids: Iterable[int]) -> int:
        """Delete expense categories by ID. Returns the number deleted."""
        category_ids = normalize_ids(category_ids, "category id")

        with self.transaction() as conn:
            cursor = conn.execute(
                f"""
                DELETE FROM expense_categories
                WHERE id IN ({placeholders(len(category_ids))})
                """,
                category_ids,
            )
            deleted = cursor.rowcount

        logger.info(f"Deleted {deleted} expense categories")
        return deleted
