"""
Appointments repository module.

Appointments are patient visits; the appointment reports count them per
service and period.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from cashbox.config import (
    MAX_COMMENT_LENGTH,
    MAX_PAYMENT_METHOD_LENGTH,
    MAX_REFERENCE_LENGTH,
    MAX_TITLE_LENGTH,
)
from cashbox.errors import ValidationError

from .base import (
    BaseRepository,
    check_text,
    normalize_ids,
    placeholders,
    to_db_timestamp,
)
from .models import Appointment

logger = logging.getLogger(__name__)

APPOINTMENT_COLUMNS = (
    "id, patient, specialist, service, appointment_at, status, comment, "
    "payment_type, created_at"
)


class AppointmentRepository(BaseRepository):
    """Repository for patient appointments."""

    def __init__(self, db_path=None, init_schema: bool = False):
        super().__init__(db_path, init_schema=init_schema)

    def add_appointment(
        self,
        service: str,
        appointment_at: datetime,
        status: str,
        patient: Optional[str] = None,
        specialist: Optional[str] = None,
        comment: Optional[str] = None,
        payment_type: Optional[str] = None,
    ) -> Appointment:
        """
        Record an appointment.

        Args:
            service: Service label the visit is booked for
            appointment_at: When the visit takes place
            status: Visit status (scheduled, completed, cancelled, ...)
            patient: Opaque patient reference
            specialist: Opaque specialist reference
            comment: Free-text comment
            payment_type: How the visit is paid, if known

        Returns:
            The created Appointment
        """
        service = check_text(service, "service", MAX_TITLE_LENGTH, required=True)
        status = check_text(status, "status", MAX_PAYMENT_METHOD_LENGTH, required=True)
        patient = check_text(patient, "patient", MAX_REFERENCE_LENGTH)
        specialist = check_text(specialist, "specialist", MAX_REFERENCE_LENGTH)
        comment = check_text(comment, "comment", MAX_COMMENT_LENGTH)
        payment_type = check_text(
            payment_type, "payment_type", MAX_PAYMENT_METHOD_LENGTH
        )
        if not isinstance(appointment_at, datetime):
            raise ValidationError(f"Invalid appointment_at: {appointment_at!r}")

        stored_at = to_db_timestamp(appointment_at)
        created_at = datetime.now().replace(microsecond=0)

        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO appointments (
                    patient, specialist, service, appointment_at, status,
                    comment, payment_type, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    patient,
                    specialist,
                    service,
                    stored_at,
                    status,
                    comment,
                    payment_type,
                    to_db_timestamp(created_at),
                ),
            )
            appointment_id = cursor.lastrowid

        logger.info(f"Added appointment {appointment_id}: {service} at {stored_at}")
        return Appointment(
            id=appointment_id,
            patient=patient,
            specialist=specialist,
            service=service,
            appointment_at=datetime.fromisoformat(stored_at),
            status=status,
            comment=comment,
            payment_type=payment_type,
            created_at=created_at,
        )

    def get_appointment(self, appointment_id: int) -> Optional[Appointment]:
        """Get an appointment by ID."""
        if not isinstance(appointment_id, int) or appointment_id <= 0:
            raise ValidationError(f"Invalid appointment_id: {appointment_id!r}")

        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT {APPOINTMENT_COLUMNS} FROM appointments WHERE id = ?",
                (appointment_id,),
            ).fetchone()
            return Appointment.from_row(row) if row else None

    def list_appointments(self, limit: Optional[int] = None) -> list[Appointment]:
        """List appointments, most recent first."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT {APPOINTMENT_COLUMNS} FROM appointments
                ORDER BY appointment_at DESC, id DESC
                LIMIT ?
                """,
                (-1 if limit is None else limit,),
            )
            return [Appointment.from_row(row) for row in cursor.fetchall()]

    def delete_appointments(self, appointment_ids: Iterable[int]) -> int:
        """Delete appointments by ID. Returns the number deleted."""
        appointment_ids = normalize_ids(appointment_ids, "appointment id")

        with self.transaction() as conn:
            cursor = conn.execute(
                f"""
                DELETE FROM appointments
                WHERE id IN ({placeholders(len(appointment_ids))})
                """,
                appointment_ids,
            )
            deleted = cursor.rowcount

        logger.info(f"Deleted {deleted} appointments")
        return deleted
