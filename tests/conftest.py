"""Shared fixtures: a fresh SQLite database per test."""

from datetime import datetime
from decimal import Decimal

import pytest

from cashbox.db import CashboxRepository
from cashbox.services.reports import ReportService


@pytest.fixture
def repository(tmp_path) -> CashboxRepository:
    return CashboxRepository(tmp_path / "cashbox.db")


@pytest.fixture
def services(repository):
    """Three catalog services: consultation, cleaning, x-ray."""
    return [
        repository.services.add_service("Consultation", Decimal("150000")),
        repository.services.add_service("Cleaning", Decimal("300000")),
        repository.services.add_service("X-Ray", Decimal("250000")),
    ]


@pytest.fixture
def report_service(repository) -> ReportService:
    return ReportService(repository.queries)


@pytest.fixture
def at():
    """Shorthand for naive server-time timestamps."""

    def _at(text: str) -> datetime:
        return datetime.fromisoformat(text)

    return _at
