"""Booking service - admission control for new appointments and staff lifecycle actions"""

import logging
from datetime import date, datetime
from typing import Optional, Union

from sqlalchemy.orm import Session

from ...constants import STATUS_ORDER, AppointmentStatus
from ...models import Appointment
from ...shared.validators import is_blank, parse_calendar_date, parse_record_id
from .errors import ConflictError, NotFoundError, ValidationError
from .repository import AppointmentRepository
from .slots import is_valid_slot

logger = logging.getLogger(__name__)


class BookingService:
    """Write path for appointments"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    def book(
        self,
        patient_id: Union[int, str],
        doctor_id: Union[int, str],
        day: Union[date, datetime, str],
        slot: str,
    ) -> Appointment:
        """
        Book a slot for a patient.

        The request is fully validated before the ledger is consulted. A
        pre-check catches the common conflict with a friendly message; the
        ledger's unique constraint catches the concurrent one.

        Raises:
            ValidationError: missing fields, unknown slot, bad date, unknown patient/doctor
            ConflictError: slot already booked for this doctor
            StoreUnavailable: store failed; booking outcome must not be assumed
        """
        if any(is_blank(value) for value in (patient_id, doctor_id, day, slot)):
            raise ValidationError("All fields required: patientId, doctorId, date, timeSlot.")

        if not is_valid_slot(slot):
            logger.warning(f"⚠️ Rejected booking for unknown time slot: {slot!r}")
            raise ValidationError(f"Invalid time slot: {slot}.")

        try:
            patient_id = parse_record_id(patient_id)
            doctor_id = parse_record_id(doctor_id)
        except ValueError as e:
            raise ValidationError("patientId and doctorId must be valid IDs.") from e

        try:
            day = parse_calendar_date(day)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        if self.repo.get_patient(self.db, patient_id) is None:
            raise ValidationError("Patient not found.")
        if self.repo.get_doctor(self.db, doctor_id) is None:
            raise ValidationError("Doctor not found.")

        if self.repo.find_by_key(self.db, doctor_id, day, slot) is not None:
            logger.warning(f"⚠️ Slot {slot} on {day} already booked for doctor {doctor_id}")
            raise ConflictError()

        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=day,
            time_slot=slot,
            status=AppointmentStatus.PENDING.value,
        )
        appointment = self.repo.insert(self.db, appointment)
        logger.info(
            f"✅ Booked appointment {appointment.id}: patient {patient_id} with doctor {doctor_id} on {day} at {slot}"
        )
        return appointment

    @staticmethod
    def _appointment_id(appointment_id: Union[int, str]) -> int:
        try:
            return parse_record_id(appointment_id)
        except ValueError as e:
            raise ValidationError("Invalid appointment ID.") from e

    def get_appointment(self, appointment_id: Union[int, str]) -> Appointment:
        appointment = self.repo.get_by_id(self.db, self._appointment_id(appointment_id))
        if not appointment:
            raise NotFoundError()
        return appointment

    def get_patient_for_user(self, user_id: int):
        """Get the patient record owned by a patient login, if any"""
        return self.repo.get_patient_for_user(self.db, user_id)

    def update_status(self, appointment_id: Union[int, str], status: Optional[str]) -> Appointment:
        """Move an appointment forward through pending -> confirmed -> completed"""
        try:
            new_status = AppointmentStatus(status)
        except ValueError as e:
            raise ValidationError("Valid status required: pending, confirmed, completed.") from e

        appointment_id = self._appointment_id(appointment_id)
        appointment = self.get_appointment(appointment_id)
        current = AppointmentStatus(appointment.status)

        if current == new_status:
            return appointment
        if STATUS_ORDER[new_status] < STATUS_ORDER[current]:
            raise ValidationError(
                f"Cannot change appointment status from {current.value} to {new_status.value}."
            )

        appointment = self.repo.update_status(self.db, appointment, new_status.value)
        logger.info(f"🔄 Appointment {appointment_id} status: {current.value} -> {new_status.value}")
        return appointment

    def cancel(self, appointment_id: Union[int, str]) -> None:
        """Cancel by deleting the appointment, which frees its slot"""
        appointment_id = self._appointment_id(appointment_id)
        if not self.repo.remove(self.db, appointment_id):
            raise NotFoundError()
        logger.info(f"🗑️ Appointment {appointment_id} cancelled")

    def list_appointments(
        self,
        doctor_id: Optional[Union[int, str]] = None,
        patient_id: Optional[Union[int, str]] = None,
        day: Optional[Union[date, str]] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        """List appointments with optional filters. Blank filters are ignored."""
        doctor_id, patient_id, day, status = (
            None if is_blank(value) else value for value in (doctor_id, patient_id, day, status)
        )
        try:
            if doctor_id is not None:
                doctor_id = parse_record_id(doctor_id)
            if patient_id is not None:
                patient_id = parse_record_id(patient_id)
        except ValueError as e:
            raise ValidationError("doctorId and patientId must be valid IDs.") from e
        if day is not None:
            try:
                day = parse_calendar_date(day)
            except ValueError as e:
                raise ValidationError(str(e)) from e
        if status is not None and status not in {s.value for s in AppointmentStatus}:
            raise ValidationError("Valid status required: pending, confirmed, completed.")

        return self.repo.list_appointments(self.db, doctor_id, patient_id, day, status)
