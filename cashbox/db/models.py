"""
Database models for the Cashbox ledger.

Defines the records stored in SQLite: the cashbox transactions and their
linked services, plus the expense and appointment records read by reports.
Amounts are stored as decimal strings and loaded as ``Decimal``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .base import from_db_timestamp


def _timestamp(value: Optional[str]) -> Optional[datetime]:
    return from_db_timestamp(value) if value else None


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(sep=" ") if value else None


@dataclass
class Service:
    """A catalog item that cashbox transactions reference."""

    id: Optional[int]
    title: str
    price: Decimal
    description: Optional[str] = None
    is_available: bool = True
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "description": self.description,
            "is_available": self.is_available,
            "created_at": _isoformat(self.created_at),
        }

    @classmethod
    def from_row(cls, row) -> "Service":
        """Create a Service from a database row."""
        return cls(
            id=row["id"],
            title=row["title"],
            price=Decimal(row["price"]),
            description=row["description"],
            is_available=bool(row["is_available"]),
            created_at=_timestamp(row["created_at"]),
        )


@dataclass
class Transaction:
    """
    A cashbox ledger entry.

    Owns its set of service links; ``services`` holds the linked catalog
    items when the transaction was loaded with them.
    """

    id: Optional[int]
    amount: Decimal
    payment_method: str
    created_at: datetime
    patient: Optional[str] = None
    specialist: Optional[str] = None
    comment: Optional[str] = None
    services: list[Service] = field(default_factory=list)

    @property
    def service_ids(self) -> list[int]:
        return [service.id for service in self.services]

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "patient": self.patient,
            "specialist": self.specialist,
            "amount": self.amount,
            "payment_method": self.payment_method,
            "comment": self.comment,
            "created_at": _isoformat(self.created_at),
            "services": [
                {"id": s.id, "title": s.title, "price": s.price} for s in self.services
            ],
        }

    @classmethod
    def from_row(cls, row) -> "Transaction":
        """Create a Transaction from a database row (without services)."""
        return cls(
            id=row["id"],
            patient=row["patient"],
            specialist=row["specialist"],
            amount=Decimal(row["amount"]),
            payment_method=row["payment_method"],
            comment=row["comment"],
            created_at=from_db_timestamp(row["created_at"]),
            services=[],
        )


@dataclass
class ExpenseCategory:
    id: Optional[int]
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": _isoformat(self.created_at),
        }

    @classmethod
    def from_row(cls, row) -> "ExpenseCategory":
        return cls(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            created_at=_timestamp(row["created_at"]),
        )


@dataclass
class Expense:
    """An operating expense, reported by category."""

    id: Optional[int]
    category: str
    amount: Decimal
    created_at: datetime
    description: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "category": self.category,
            "amount": self.amount,
            "description": self.description,
            "created_at": _isoformat(self.created_at),
        }

    @classmethod
    def from_row(cls, row) -> "Expense":
        """Create an Expense from a database row."""
        return cls(
            id=row["id"],
            category=row["category"],
            amount=Decimal(row["amount"]),
            description=row["description"],
            created_at=from_db_timestamp(row["created_at"]),
        )


@dataclass
class Appointment:
    """A patient visit, reported by service and status."""

    id: Optional[int]
    service: str
    appointment_at: datetime
    status: str
    patient: Optional[str] = None
    specialist: Optional[str] = None
    comment: Optional[str] = None
    payment_type: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "patient": self.patient,
            "specialist": self.specialist,
            "service": self.service,
            "appointment_at": _isoformat(self.appointment_at),
            "status": self.status,
            "comment": self.comment,
            "payment_type": self.payment_type,
            "created_at": _isoformat(self.created_at),
        }

    @classmethod
    def from_row(cls, row) -> "Appointment":
        """Create an Appointment from a database row."""
        return cls(
            id=row["id"],
            patient=row["patient"],
            specialist=row["specialist"],
            service=row["service"],
            appointment_at=from_db_timestamp(row["appointment_at"]),
            status=row["status"],
            comment=row["comment"],
            payment_type=row["payment_type"],
            created_at=_timestamp(row["created_at"]),
        )


@dataclass
class CashboxRow:
    """
    One (transaction, linked service) pair as read for revenue reports.

    A transaction linked to several services yields one row per service,
    each carrying the full transaction amount.
    """

    transaction_id: int
    service_id: int
    service_title: str
    amount: Decimal
    payment_method: str
    created_at: datetime

    @classmethod
    def from_row(cls, row) -> "CashboxRow":
        return cls(
            transaction_id=row["transaction_id"],
            service_id=row["service_id"],
            service_title=row["service_title"],
            amount=Decimal(row["amount"]),
            payment_method=row["payment_method"],
            created_at=from_db_timestamp(row["created_at"]),
        )
