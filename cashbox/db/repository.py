"""
Main repository facade for the cashbox ledger.

Composes the specialized repositories over one database path and
initializes the schema once. Callers construct it explicitly and pass it to
whatever needs the store; there is no module-level instance.
"""

import logging
from pathlib import Path
from typing import Optional

from .appointments import AppointmentRepository
from .base import BaseRepository
from .expenses import ExpenseRepository
from .queries import QueryRepository
from .services import ServiceRepository
from .transactions import TransactionRepository

logger = logging.getLogger(__name__)


class CashboxRepository(BaseRepository):
    """
    Facade over the ledger, catalog, record and query repositories.

    Attributes:
        transactions: Ledger writer (cashbox transactions and service links)
        services: Service catalog
        expenses: Expenses and expense categories
        appointments: Patient appointments
        queries: Read-only report inputs
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize the repository and all sub-repositories.

        Args:
            db_path: Path to the SQLite database file. Defaults to data/cashbox.db
        """
        super().__init__(db_path, init_schema=True)

        self.transactions = TransactionRepository(self.db_path)
        self.services = ServiceRepository(self.db_path)
        self.expenses = ExpenseRepository(self.db_path)
        self.appointments = AppointmentRepository(self.db_path)
        self.queries = QueryRepository(self.db_path)

        logger.info(f"Cashbox repository ready at {self.db_path}")

    # =========================================================================
    # Ledger Writer (delegated to TransactionRepository)
    # =========================================================================

    def create_transaction(self, *args, **kwargs) -> int:
        """Create a transaction linked to services. See TransactionRepository."""
        return self.transactions.create_transaction(*args, **kwargs)

    def get_transaction(self, transaction_id: int):
        return self.transactions.get_transaction(transaction_id)

    def update_transaction(self, *args, **kwargs):
        """Update a transaction with full link replacement."""
        return self.transactions.update_transaction(*args, **kwargs)

    def delete_transaction(self, transaction_id: int) -> bool:
        return self.transactions.delete_transaction(transaction_id)

    def delete_transactions(self, transaction_ids) -> int:
        return self.transactions.delete_transactions(transaction_ids)

    def list_transactions(self, limit: Optional[int] = None, offset: int = 0):
        return self.transactions.list_transactions(limit=limit, offset=offset)

    def count_transactions(self) -> int:
        return self.transactions.count_transactions()
