"""Schedule resolver - per-day slot availability for one doctor"""

import logging
from datetime import date, datetime
from typing import Union

from sqlalchemy.orm import Session

from ...shared.validators import is_blank, parse_calendar_date, parse_record_id
from .errors import ValidationError
from .repository import AppointmentRepository
from .schemas import SlotInfo, SlotOccupant
from .slots import all_slots

logger = logging.getLogger(__name__)


class ScheduleService:
    """Read path: merges the slot grid with the ledger. Holds no state between calls."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    def resolve(self, doctor_id: Union[int, str], day: Union[date, datetime, str]) -> list[SlotInfo]:
        """
        Build a doctor's timetable for one day.

        Returns one SlotInfo per grid slot in grid order. Occupied slots carry
        the appointment id, patient name and status.
        """
        if is_blank(doctor_id) or is_blank(day):
            raise ValidationError("doctorId and date are required.")
        try:
            doctor_id = parse_record_id(doctor_id)
            day = parse_calendar_date(day)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        appointments = self.repo.find_for_doctor_and_date(self.db, doctor_id, day)
        booked = {appointment.time_slot: appointment for appointment in appointments}

        schedule = []
        for slot in all_slots():
            appointment = booked.get(slot)
            if appointment is None:
                schedule.append(SlotInfo(slot=slot, available=True))
                continue
            schedule.append(
                SlotInfo(
                    slot=slot,
                    available=False,
                    occupiedBy=SlotOccupant(
                        appointmentId=appointment.id,
                        patientName=appointment.patient.name if appointment.patient else "Unknown",
                        status=appointment.status,
                    ),
                )
            )

        logger.debug(
            f"📅 Resolved schedule for doctor {doctor_id} on {day}: {len(booked)}/{len(schedule)} booked"
        )
        return schedule
