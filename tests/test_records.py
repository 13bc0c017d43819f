"""Tests for the catalog, expense and appointment repositories."""

from datetime import datetime
from decimal import Decimal

import pytest

from cashbox.errors import StoreError, ValidationError


class TestServiceRepository:
    """Test ServiceRepository."""

    def test_list_orders_by_title(self, repository, services):
        titles = [s.title for s in repository.services.list_services()]
        assert titles == ["Cleaning", "Consultation", "X-Ray"]

    def test_available_only(self, repository, services):
        repository.services.add_service("Retired", 10, is_available=False)

        available = repository.services.list_services(available_only=True)

        assert "Retired" not in [s.title for s in available]

    def test_duplicate_title_is_store_error(self, repository, services):
        with pytest.raises(StoreError):
            repository.services.add_service("Cleaning", 1)

    def test_free_service_allowed(self, repository):
        service = repository.services.add_service("Follow-up", 0)
        assert repository.services.get_service(service.id).price == Decimal("0")


class TestExpenseRepository:
    """Test ExpenseRepository."""

    def test_add_and_get(self, repository):
        expense = repository.expenses.add_expense(
            "Supplies", "120.50", description="gloves",
            created_at=datetime(2024, 1, 5, 10, 30),
        )

        loaded = repository.expenses.get_expense(expense.id)

        assert loaded.amount == Decimal("120.50")
        assert loaded.description == "gloves"
        assert loaded.created_at == datetime(2024, 1, 5, 10, 30)

    def test_update_keeps_omitted_fields(self, repository):
        expense = repository.expenses.add_expense("Supplies", 100)

        updated = repository.expenses.update_expense(expense.id, amount=80)

        assert updated.amount == Decimal("80")
        assert updated.category == "Supplies"

    def test_update_missing_returns_none(self, repository):
        assert repository.expenses.update_expense(42, amount=1) is None

    def test_delete_many(self, repository):
        ids = [repository.expenses.add_expense("Rent", 10).id for _ in range(3)]

        assert repository.expenses.delete_expenses(ids[:2]) == 2
        assert [e.id for e in repository.expenses.list_expenses()] == [ids[2]]

    def test_delete_requires_ids(self, repository):
        with pytest.raises(ValidationError):
            repository.expenses.delete_expenses([])

    def test_categories(self, repository):
        rent = repository.expenses.add_category("Rent")
        repository.expenses.add_category("Payroll", "monthly salaries")

        assert [c.name for c in repository.expenses.list_categories()] == [
            "Payroll",
            "Rent",
        ]
        assert repository.expenses.delete_categories([rent.id]) == 1
        assert [c.name for c in repository.expenses.list_categories()] == ["Payroll"]


class TestAppointmentRepository:
    """Test AppointmentRepository."""

    def test_add_and_list(self, repository, at):
        first = repository.appointments.add_appointment(
            "Cleaning", at("2024-01-03 09:00:00"), "scheduled", patient="P-1"
        )
        second = repository.appointments.add_appointment(
            "Consultation", at("2024-01-04 09:00:00"), "completed",
            payment_type="cash",
        )

        listed = repository.appointments.list_appointments()

        assert [a.id for a in listed] == [second.id, first.id]
        assert repository.appointments.get_appointment(first.id).patient == "P-1"

    def test_status_required(self, repository, at):
        with pytest.raises(ValidationError):
            repository.appointments.add_appointment(
                "Cleaning", at("2024-01-03 09:00:00"), ""
            )

    def test_delete_many(self, repository, at):
        appointment = repository.appointments.add_appointment(
            "Cleaning", at("2024-01-03 09:00:00"), "scheduled"
        )

        assert repository.appointments.delete_appointments([appointment.id]) == 1
        assert repository.appointments.get_appointment(appointment.id) is None
