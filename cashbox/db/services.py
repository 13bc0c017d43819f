"""
Service catalog repository.

Services are the catalog items a cashbox transaction is linked to. A service
that is still referenced by a transaction cannot be deleted.
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
from .models import Service

logger = logging.getLogger(__name__)

SERVICE_COLUMNS = "id, title, description, price, is_available, created_at"


class ServiceRepository(BaseRepository):
    """Repository for the service catalog."""

    def __init__(self, db_path=None, init_schema: bool = False):
        super().__init__(db_path, init_schema=init_schema)

    def add_service(
        self,
        title: str,
        price: Union[Decimal, int, float, str],
        description: Optional[str] = None,
        is_available: bool = True,
    ) -> Service:
        """
        Add a service to the catalog.

        Args:
            title: Unique service title
            price: List price (zero allowed for free services)
            description: Optional description
            is_available: Whether the service can currently be sold

        Returns:
            The created Service
        """
        title = check_text(title, "title", MAX_TITLE_LENGTH, required=True)
        price = parse_amount(price, allow_zero=True)
        description = check_text(description, "description", MAX_COMMENT_LENGTH)
        created_at = datetime.now().replace(microsecond=0)

        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO services (title, description, price, is_available, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    title,
                    description,
                    str(price),
                    1 if is_available else 0,
                    to_db_timestamp(created_at),
                ),
            )
            service_id = cursor.lastrowid

        logger.info(f"Added service {service_id}: {title} ({price})")
        return Service(
            id=service_id,
            title=title,
            price=price,
            description=description,
            is_available=is_available,
            created_at=created_at,
        )

    def get_service(self, service_id: int) -> Optional[Service]:
        """Get a service by ID."""
        if not isinstance(service_id, int) or service_id <= 0:
            raise ValidationError(f"Invalid service_id: {service_id!r}")

        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT {SERVICE_COLUMNS} FROM services WHERE id = ?",
                (service_id,),
            ).fetchone()
            return Service.from_row(row) if row else None

    def list_services(self, available_only: bool = False) -> list[Service]:
        """
        List catalog services ordered by title.

        Args:
            available_only: Only return services that can currently be sold
        """
        query = f"SELECT {SERVICE_COLUMNS} FROM services"
        if available_only:
            query += " WHERE is_available = 1"
        query += " ORDER BY title COLLATE NOCASE"

        with self._get_connection() as conn:
            return [Service.from_row(row) for row in conn.execute(query).fetchall()]

    def delete_services(self, service_ids: Iterable[int]) -> int:
        """
        Delete services by ID.

        Raises:
            StoreError: If any of the services is still linked to a transaction
        """
        service_ids = normalize_ids(service_ids, "service id")

        with self.transaction() as conn:
            cursor = conn.execute(
                f"DELETE FROM services WHERE id IN ({placeholders(len(service_ids))})",
                service_ids,
            )
            deleted = cursor.rowcount

        logger.info(f"Deleted {deleted} services")
        return deleted
