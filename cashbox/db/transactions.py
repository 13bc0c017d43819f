"""
Transactions repository module for cashbox ledger operations.

Handles all transaction-related database operations including:
- Creating transactions together with their service links (atomic)
- Reading transactions with their linked services
- Updating transactions with full replacement of the service links (atomic)
- Deleting transactions and their links
"""

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

from cashbox.config import (
    MAX_COMMENT_LENGTH,
    MAX_PAYMENT_METHOD_LENGTH,
    MAX_REFERENCE_LENGTH,
)
from cashbox.errors import ValidationError

from .base import (
    BaseRepository,
    check_text,
    normalize_ids,
    parse_amount,
    placeholders,
    to_db_timestamp,
)
from .models import Service, Transaction

logger = logging.getLogger(__name__)

TRANSACTION_COLUMNS = (
    "id, patient, specialist, amount, payment_method, comment, created_at"
)

# Keeps IN (...) lists under SQLite's bound-parameter limit
_ID_CHUNK_SIZE = 500


def _chunks(ids: list[int], size: int = _ID_CHUNK_SIZE):
    for start in range(0, len(ids), size):
        yield ids[start : start + size]


class TransactionRepository(BaseRepository):
    """
    Repository for managing cashbox transactions and their service links.

    A transaction and its links are always written inside one scoped
    transaction, so a partially linked transaction is never observable.
    """

    def __init__(self, db_path=None, init_schema: bool = False):
        """
        Initialize the transaction repository.

        Args:
            db_path: Path to the SQLite database file
            init_schema: Whether to initialize schema
        """
        super().__init__(db_path, init_schema=init_schema)

    # =========================================================================
    # Create Operations
    # =========================================================================

    def create_transaction(
        self,
        amount: Union[Decimal, int, float, str],
        payment_method: str,
        service_ids: Iterable[int],
        patient: Optional[str] = None,
        specialist: Optional[str] = None,
        comment: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> int:
        """
        Create a transaction linked to one or more services.

        The transaction row and every link row are inserted in one scoped
        transaction; if any link fails (e.g. an unknown service id) the
        transaction insert is rolled back too.

        Args:
            amount: Transaction amount (must be positive)
            payment_method: How the patient paid (cash, card, ...)
            service_ids: Non-empty set of service ids to link
            patient: Opaque patient reference
            specialist: Opaque specialist reference
            comment: Free-text comment
            created_at: Timestamp override (defaults to now, server time)

        Returns:
            The new transaction id

        Raises:
            ValidationError: If the input is invalid
            StoreError: If the store rejects the write (nothing is persisted)
        """
        service_ids = normalize_ids(service_ids, "service id")
        amount = parse_amount(amount)
        payment_method = check_text(
            payment_method, "payment_method", MAX_PAYMENT_METHOD_LENGTH, required=True
        )
        patient = check_text(patient, "patient", MAX_REFERENCE_LENGTH)
        specialist = check_text(specialist, "specialist", MAX_REFERENCE_LENGTH)
        comment = check_text(comment, "comment", MAX_COMMENT_LENGTH)

        if created_at is None:
            created_at = datetime.now()
        elif not isinstance(created_at, datetime):
            raise ValidationError(f"Invalid created_at: {created_at!r}")

        with self.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO transactions (
                    patient, specialist, amount, payment_method, comment, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    patient,
                    specialist,
                    str(amount),
                    payment_method,
                    comment,
                    to_db_timestamp(created_at),
                ),
            )
            transaction_id = cursor.lastrowid
            self._insert_links(conn, transaction_id, service_ids)

        logger.info(
            f"Created transaction {transaction_id}: {amount} via {payment_method} "
            f"for services {service_ids}"
        )
        return transaction_id

    def _insert_links(self, conn, transaction_id: int, service_ids: list[int]):
        conn.executemany(
            """
            INSERT INTO transaction_services (transaction_id, service_id)
            VALUES (?, ?)
            """,
            [(transaction_id, service_id) for service_id in service_ids],
        )

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """
        Get a transaction with its linked services by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction with services, or None if not found
        """
        transaction_id = self._check_id(transaction_id)

        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE id = ?",
                (transaction_id,),
            ).fetchone()

            if not row:
                return None

            transaction = Transaction.from_row(row)
            transaction.services = self._load_services(conn, [transaction_id])[
                transaction_id
            ]
            return transaction

    def list_transactions(
        self,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """
        List transactions, most recent first, each with its services.

        Args:
            limit: Maximum number of transactions (None for all)
            offset: Number of transactions to skip

        Returns:
            List of Transaction objects
        """
        if limit is not None and limit <= 0:
            raise ValidationError(f"Invalid limit: {limit}")
        if offset < 0:
            offset = 0

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT {TRANSACTION_COLUMNS}
                FROM transactions
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (-1 if limit is None else limit, offset),
            )
            transactions = [Transaction.from_row(row) for row in cursor.fetchall()]

            if transactions:
                services = self._load_services(conn, [t.id for t in transactions])
                for transaction in transactions:
                    transaction.services = services[transaction.id]

            logger.debug(f"Retrieved {len(transactions)} transactions")
            return transactions

    def count_transactions(self) -> int:
        """Count all transactions."""
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM transactions").fetchone()[0]

    def _load_services(
        self, conn, transaction_ids: list[int]
    ) -> defaultdict[int, list[Service]]:
        """Join links to the catalog and group the services per transaction."""
        services: defaultdict[int, list[Service]] = defaultdict(list)

        for chunk in _chunks(transaction_ids):
            cursor = conn.execute(
                f"""
                SELECT ts.transaction_id, s.id, s.title, s.description, s.price,
                       s.is_available, s.created_at
                FROM transaction_services ts
                JOIN services s ON s.id = ts.service_id
                WHERE ts.transaction_id IN ({placeholders(len(chunk))})
                ORDER BY ts.transaction_id, s.id
                """,
                chunk,
            )
            for row in cursor.fetchall():
                services[row["transaction_id"]].append(Service.from_row(row))

        return services

    # =========================================================================
    # Update Operations
    # =========================================================================

    def update_transaction(
        self,
        transaction_id: int,
        service_ids: Iterable[int],
        amount: Optional[Union[Decimal, int, float, str]] = None,
        payment_method: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> Optional[Transaction]:
        """
        Update a transaction and replace its full set of service links.

        Scalar fields left as None keep their current value; an empty
        comment clears it. The scalar update, the removal of every existing
        link and the insertion of the new links form one atomic unit: on any
        failure the transaction and its previous links are left untouched.

        Args:
            transaction_id: Transaction ID to update
            service_ids: Non-empty set of service ids that replaces the links
            amount: New amount (if changing)
            payment_method: New payment method (if changing)
            comment: New comment (if changing)

        Returns:
            Updated Transaction, or None if not found

        Raises:
            ValidationError: If the input is invalid (nothing is written)
            StoreError: If the store rejects the write (everything is rolled back)
        """
        transaction_id = self._check_id(transaction_id)
        service_ids = normalize_ids(service_ids, "service id")
        new_amount = parse_amount(amount) if amount is not None else None
        new_payment_method = (
            check_text(
                payment_method,
                "payment_method",
                MAX_PAYMENT_METHOD_LENGTH,
                required=True,
            )
            if payment_method is not None
            else None
        )
        new_comment = (
            check_text(comment, "comment", MAX_COMMENT_LENGTH)
            if comment is not None
            else None
        )

        with self.transaction() as conn:
            current = conn.execute(
                "SELECT amount, payment_method, comment FROM transactions WHERE id = ?",
                (transaction_id,),
            ).fetchone()

            if current is None:
                logger.warning(f"Transaction {transaction_id} not found for update")
                return None

            final_amount = (
                str(new_amount) if new_amount is not None else current["amount"]
            )
            final_payment_method = new_payment_method or current["payment_method"]
            final_comment = new_comment if comment is not None else current["comment"]

            conn.execute(
                """
                UPDATE transactions
                SET amount = ?, payment_method = ?, comment = ?
                WHERE id = ?
                """,
                (final_amount, final_payment_method, final_comment, transaction_id),
            )

            # Full replace: drop every link, then install the new set
            conn.execute(
                "DELETE FROM transaction_services WHERE transaction_id = ?",
                (transaction_id,),
            )
            self._insert_links(conn, transaction_id, service_ids)

        logger.info(
            f"Updated transaction {transaction_id}: amount={final_amount}, "
            f"method={final_payment_method}, services={service_ids}"
        )
        return self.get_transaction(transaction_id)

    # =========================================================================
    # Delete Operations
    # =========================================================================

    def delete_transaction(self, transaction_id: int) -> bool:
        """
        Delete a transaction and its service links.

        Returns:
            True if deleted, False if not found
        """
        return self.delete_transactions([transaction_id]) > 0

    def delete_transactions(self, transaction_ids: Iterable[int]) -> int:
        """
        Delete a set of transactions and their service links.

        Returns:
            Number of transactions deleted
        """
        transaction_ids = normalize_ids(transaction_ids, "transaction id")

        with self.transaction() as conn:
            deleted = 0
            for chunk in _chunks(transaction_ids):
                marks = placeholders(len(chunk))
                conn.execute(
                    f"DELETE FROM transaction_services WHERE transaction_id IN ({marks})",
                    chunk,
                )
                cursor = conn.execute(
                    f"DELETE FROM transactions WHERE id IN ({marks})", chunk
                )
                deleted += cursor.rowcount

        logger.info(f"Deleted {deleted} of {len(transaction_ids)} transactions")
        return deleted

    @staticmethod
    def _check_id(transaction_id: int) -> int:
        if isinstance(transaction_id, bool) or not isinstance(transaction_id, int):
            raise ValidationError(f"Invalid transaction_id: {transaction_id!r}")
        if transaction_id <= 0:
            raise ValidationError(f"Invalid transaction_id: {transaction_id}")
        return transaction_id
