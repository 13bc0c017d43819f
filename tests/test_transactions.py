"""
Tests for the cashbox ledger writer.

Covers atomic create, full-replace update with rollback, delete and listing.
"""

import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from cashbox.errors import ErrorKind, StoreError, ValidationError

MISSING_SERVICE_ID = 9999


def _link_count(repository, transaction_id=None) -> int:
    query = "SELECT COUNT(*) FROM transaction_services"
    params = ()
    if transaction_id is not None:
        query += " WHERE transaction_id = ?"
        params = (transaction_id,)
    with repository._get_connection() as conn:
        return conn.execute(query, params).fetchone()[0]


class TestCreateTransaction:
    """Test TransactionRepository.create_transaction."""

    def test_create_links_every_service(self, repository, services):
        consultation, cleaning, _ = services

        transaction_id = repository.create_transaction(
            amount="450000",
            payment_method="cash",
            service_ids=[consultation.id, cleaning.id],
            patient="P-001",
            comment="first visit",
        )

        transaction = repository.get_transaction(transaction_id)
        assert transaction.amount == Decimal("450000")
        assert transaction.payment_method == "cash"
        assert transaction.patient == "P-001"
        assert transaction.comment == "first visit"
        assert transaction.service_ids == [consultation.id, cleaning.id]
        assert [s.title for s in transaction.services] == ["Consultation", "Cleaning"]

    def test_unknown_service_rolls_back_transaction(self, repository, services):
        with pytest.raises(StoreError) as exc_info:
            repository.create_transaction(
                amount=100,
                payment_method="card",
                service_ids=[services[0].id, MISSING_SERVICE_ID],
            )

        assert exc_info.value.kind == ErrorKind.STORE
        assert repository.count_transactions() == 0
        assert _link_count(repository) == 0

    def test_empty_service_set_is_rejected(self, repository):
        with pytest.raises(ValidationError):
            repository.create_transaction(
                amount=100, payment_method="cash", service_ids=[]
            )
        assert repository.count_transactions() == 0

    def test_duplicate_service_ids_collapse(self, repository, services):
        consultation, cleaning, _ = services

        transaction_id = repository.create_transaction(
            amount=100,
            payment_method="cash",
            service_ids=[cleaning.id, consultation.id, cleaning.id],
        )

        assert _link_count(repository, transaction_id) == 2

    @pytest.mark.parametrize("amount", [0, -5, "abc", "NaN", True])
    def test_invalid_amount_is_rejected(self, repository, services, amount):
        with pytest.raises(ValidationError):
            repository.create_transaction(
                amount=amount, payment_method="cash", service_ids=[services[0].id]
            )

    def test_payment_method_is_required(self, repository, services):
        with pytest.raises(ValidationError):
            repository.create_transaction(
                amount=100, payment_method="  ", service_ids=[services[0].id]
            )

    def test_aware_timestamp_is_stored_in_server_time(self, repository, services):
        created_at = datetime(2024, 3, 10, 8, 30, tzinfo=timezone.utc)

        transaction_id = repository.create_transaction(
            amount=100,
            payment_method="cash",
            service_ids=[services[0].id],
            created_at=created_at,
        )

        stored = repository.get_transaction(transaction_id).created_at
        assert stored.tzinfo is None
        assert stored == created_at.astimezone().replace(tzinfo=None)


class TestReadTransaction:
    """Test TransactionRepository.get_transaction and list_transactions."""

    def test_missing_transaction_returns_none(self, repository):
        assert repository.get_transaction(42) is None

    def test_non_positive_id_is_rejected(self, repository):
        with pytest.raises(ValidationError):
            repository.get_transaction(0)

    def test_list_is_newest_first(self, repository, services, at):
        service_ids = [services[0].id]
        older = repository.create_transaction(
            100, "cash", service_ids, created_at=at("2024-01-01 09:00:00")
        )
        newer = repository.create_transaction(
            200, "card", service_ids, created_at=at("2024-01-05 09:00:00")
        )
        middle = repository.create_transaction(
            300, "cash", service_ids, created_at=at("2024-01-03 09:00:00")
        )

        listed = repository.list_transactions()

        assert [t.id for t in listed] == [newer, middle, older]
        assert all(t.service_ids == service_ids for t in listed)

    def test_list_pagination(self, repository, services, at):
        start = at("2024-01-01 09:00:00")
        ids = [
            repository.create_transaction(
                100, "cash", [services[0].id], created_at=start + timedelta(days=i)
            )
            for i in range(5)
        ]

        page = repository.list_transactions(limit=2, offset=1)

        assert [t.id for t in page] == [ids[3], ids[2]]


class TestUpdateTransaction:
    """Test TransactionRepository.update_transaction."""

    def test_update_replaces_links_and_keeps_omitted_fields(
        self, repository, services
    ):
        consultation, cleaning, xray = services
        transaction_id = repository.create_transaction(
            amount=400, payment_method="cash",
            service_ids=[consultation.id, cleaning.id], comment="note",
        )

        updated = repository.update_transaction(transaction_id, [xray.id])

        assert updated.service_ids == [xray.id]
        assert updated.amount == Decimal("400")
        assert updated.payment_method == "cash"
        assert updated.comment == "note"
        assert _link_count(repository, transaction_id) == 1

    def test_update_changes_scalar_fields(self, repository, services):
        transaction_id = repository.create_transaction(
            amount=400, payment_method="cash", service_ids=[services[0].id],
            comment="note",
        )

        updated = repository.update_transaction(
            transaction_id,
            [services[0].id],
            amount="425.50",
            payment_method="card",
            comment="",
        )

        assert updated.amount == Decimal("425.50")
        assert updated.payment_method == "card"
        assert updated.comment is None

    def test_failed_update_leaves_transaction_untouched(self, repository, services):
        consultation, cleaning, xray = services
        transaction_id = repository.create_transaction(
            amount=400, payment_method="cash",
            service_ids=[consultation.id, cleaning.id],
        )

        with pytest.raises(StoreError):
            repository.update_transaction(
                transaction_id,
                [xray.id, MISSING_SERVICE_ID],
                amount=999,
            )

        transaction = repository.get_transaction(transaction_id)
        assert transaction.amount == Decimal("400")
        assert transaction.service_ids == [consultation.id, cleaning.id]

    def test_empty_service_set_is_rejected(self, repository, services):
        transaction_id = repository.create_transaction(
            amount=400, payment_method="cash", service_ids=[services[0].id]
        )

        with pytest.raises(ValidationError):
            repository.update_transaction(transaction_id, [])

        assert repository.get_transaction(transaction_id).service_ids == [
            services[0].id
        ]

    def test_concurrent_updates_serialize_last_commit_wins(
        self, repository, services
    ):
        consultation, cleaning, _ = services
        transaction_id = repository.create_transaction(
            100, "cash", [consultation.id]
        )
        results, errors = [], []

        def update():
            try:
                results.append(
                    repository.update_transaction(
                        transaction_id, [cleaning.id], amount=200
                    )
                )
            except Exception as e:
                errors.append(e)

        worker = threading.Thread(target=update)
        with repository.transactions.transaction() as conn:
            conn.execute(
                "SELECT amount FROM transactions WHERE id = ?", (transaction_id,)
            ).fetchone()
            worker.start()
            # The second writer waits for this unit of work to commit
            worker.join(timeout=0.5)
            assert worker.is_alive()
            conn.execute(
                "UPDATE transactions SET amount = ? WHERE id = ?",
                ("150", transaction_id),
            )
        worker.join(timeout=10)

        assert not worker.is_alive()
        assert errors == []
        assert results[0].amount == Decimal("200")
        loaded = repository.get_transaction(transaction_id)
        assert loaded.amount == Decimal("200")
        assert loaded.service_ids == [cleaning.id]

    def test_missing_transaction_returns_none(self, repository, services):
        assert repository.update_transaction(42, [services[0].id]) is None


class TestDeleteTransaction:
    """Test TransactionRepository.delete_transaction(s)."""

    def test_delete_removes_transaction_and_links(self, repository, services):
        transaction_id = repository.create_transaction(
            amount=100, payment_method="cash",
            service_ids=[services[0].id, services[1].id],
        )

        assert repository.delete_transaction(transaction_id) is True
        assert repository.get_transaction(transaction_id) is None
        assert _link_count(repository) == 0

    def test_delete_missing_returns_false(self, repository):
        assert repository.delete_transaction(42) is False

    def test_delete_many_counts_removed(self, repository, services):
        ids = [
            repository.create_transaction(100, "cash", [services[0].id])
            for _ in range(3)
        ]

        assert repository.delete_transactions([ids[0], ids[2], 4242]) == 2
        assert [t.id for t in repository.list_transactions()] == [ids[1]]

    def test_linked_service_cannot_be_deleted(self, repository, services):
        repository.create_transaction(100, "cash", [services[0].id])

        with pytest.raises(StoreError):
            repository.services.delete_services([services[0].id])

        assert repository.services.get_service(services[0].id) is not None
