"""
Database module for the Cashbox ledger.

This module provides the SQLite layer for the clinic back office: the
cashbox ledger, the service catalog, expenses, appointments and the
read-only report queries.

Structure:
- base.py: Base repository with connection/transaction management and schema
- models.py: Data models (Service, Transaction, Expense, Appointment, ...)
- transactions.py: Ledger writer (transactions and their service links)
- services.py: Service catalog
- expenses.py: Expenses and expense categories
- appointments.py: Patient appointments
- queries.py: Report input queries
- repository.py: Facade that composes all sub-repositories
"""

from .appointments import AppointmentRepository
from .base import BaseRepository
from .expenses import ExpenseRepository
from .models import (
    Appointment,
    CashboxRow,
    Expense,
    ExpenseCategory,
    Service,
    Transaction,
)
from .queries import QueryRepository
from .repository import CashboxRepository
from .services import ServiceRepository
from .transactions import TransactionRepository

__all__ = [
    # Base
    "BaseRepository",
    # Models
    "Appointment",
    "CashboxRow",
    "Expense",
    "ExpenseCategory",
    "Service",
    "Transaction",
    # Repositories
    "AppointmentRepository",
    "CashboxRepository",
    "ExpenseRepository",
    "QueryRepository",
    "ServiceRepository",
    "TransactionRepository",
]
