"""Booking ledger - Database operations for appointments"""

import logging
from contextlib import contextmanager
from datetime import date
from typing import Optional

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, joinedload

from ...constants import Role
from ...models import Appointment, Patient, User
from .errors import ConflictError, StoreUnavailable, ValidationError

logger = logging.getLogger(__name__)


@contextmanager
def store_guard(db: Session, operation: str):
    """Translate connection failures and timeouts into StoreUnavailable"""
    try:
        yield
    except (OperationalError, PoolTimeoutError) as e:
        db.rollback()
        logger.error(f"❌ Store failure during {operation}: {e}")
        raise StoreUnavailable() from e
    except DBAPIError as e:
        if not e.connection_invalidated:
            raise
        db.rollback()
        logger.error(f"❌ Lost database connection during {operation}: {e}")
        raise StoreUnavailable() from e


class AppointmentRepository:
    """Authoritative store of active appointments keyed by (doctor, date, slot)"""

    @staticmethod
    def find_by_key(db: Session, doctor_id: int, day: date, slot: str) -> Optional[Appointment]:
        """Get the appointment occupying an exact booking key"""
        with store_guard(db, "booking key lookup"):
            return (
                db.query(Appointment)
                .filter(
                    Appointment.doctor_id == doctor_id,
                    Appointment.appointment_date == day,
                    Appointment.time_slot == slot,
                )
                .first()
            )

    @staticmethod
    def find_for_doctor_and_date(db: Session, doctor_id: int, day: date) -> list[Appointment]:
        """Get a doctor's appointments for one day in a single query"""
        with store_guard(db, "day schedule lookup"):
            return (
                db.query(Appointment)
                .options(joinedload(Appointment.patient))
                .filter(Appointment.doctor_id == doctor_id, Appointment.appointment_date == day)
                .all()
            )

    @staticmethod
    def insert(db: Session, appointment: Appointment) -> Appointment:
        """
        Persist a new appointment.

        The unique constraint on (doctor_id, appointment_date, time_slot) is
        what actually prevents double-booking when two requests pass the
        pre-check at the same time; its violation is reported as ConflictError.
        """
        doctor_id = appointment.doctor_id
        day = appointment.appointment_date
        slot = appointment.time_slot

        with store_guard(db, "appointment insert"):
            db.add(appointment)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                if AppointmentRepository.find_by_key(db, doctor_id, day, slot) is not None:
                    logger.warning(
                        f"⚠️ Unique constraint rejected booking: doctor {doctor_id} on {day} at {slot}"
                    )
                    raise ConflictError() from e
                logger.warning(f"⚠️ Appointment insert failed integrity check: {e.orig}")
                raise ValidationError("Appointment references an unknown patient or doctor.") from e
            db.refresh(appointment)
        return appointment

    @staticmethod
    def remove(db: Session, appointment_id: int) -> bool:
        """Delete an appointment, releasing its booking key. Returns False if it did not exist."""
        with store_guard(db, "appointment delete"):
            appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
            if appointment is None:
                return False
            db.delete(appointment)
            db.commit()
        return True

    @staticmethod
    def get_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        with store_guard(db, "appointment lookup"):
            return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def update_status(db: Session, appointment: Appointment, status: str) -> Appointment:
        with store_guard(db, "appointment status update"):
            appointment.status = status
            db.commit()
            db.refresh(appointment)
        return appointment

    @staticmethod
    def list_appointments(
        db: Session,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        day: Optional[date] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        """List appointments with optional filters, ordered by date then slot"""
        with store_guard(db, "appointment listing"):
            query = db.query(Appointment).options(
                joinedload(Appointment.patient), joinedload(Appointment.doctor)
            )

            if doctor_id is not None:
                query = query.filter(Appointment.doctor_id == doctor_id)
            if patient_id is not None:
                query = query.filter(Appointment.patient_id == patient_id)
            if day is not None:
                query = query.filter(Appointment.appointment_date == day)
            if status:
                query = query.filter(Appointment.status == status)

            return query.order_by(Appointment.appointment_date, Appointment.time_slot).all()

    # Directory lookups used for booking validation
    @staticmethod
    def get_patient(db: Session, patient_id: int) -> Optional[Patient]:
        with store_guard(db, "patient lookup"):
            return db.query(Patient).filter(Patient.id == patient_id).first()

    @staticmethod
    def get_patient_for_user(db: Session, user_id: int) -> Optional[Patient]:
        """Get the patient record a self-registered user created"""
        with store_guard(db, "patient lookup"):
            return db.query(Patient).filter(Patient.created_by == user_id).first()

    @staticmethod
    def get_doctor(db: Session, doctor_id: int) -> Optional[User]:
        with store_guard(db, "doctor lookup"):
            return (
                db.query(User)
                .filter(User.id == doctor_id, User.role == Role.DOCTOR.value)
                .first()
            )
