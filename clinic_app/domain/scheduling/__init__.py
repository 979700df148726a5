"""
Scheduling Domain

Appointment booking over a fixed clinic-wide slot grid.

Structure:
- slots.py             # Slot grid (ordered time-of-day labels)
- repository.py        # Booking ledger (appointments table, unique booking key)
- schedule_service.py  # Per-day availability for one doctor (read path)
- booking_service.py   # Admission control and staff lifecycle actions (write path)
- errors.py            # ValidationError, ConflictError, NotFoundError, StoreUnavailable
- schemas.py           # Pydantic request/response models
- router.py            # /appointments endpoints

Double-booking is prevented twice: a pre-check returns a friendly conflict,
and the (doctor_id, appointment_date, time_slot) unique constraint rejects
the loser of a concurrent race. Both surface as ConflictError.
"""

from .booking_service import BookingService
from .errors import ConflictError, NotFoundError, SchedulingError, StoreUnavailable, ValidationError
from .schedule_service import ScheduleService
from .slots import all_slots

__all__ = [
    "BookingService",
    "ConflictError",
    "NotFoundError",
    "ScheduleService",
    "SchedulingError",
    "StoreUnavailable",
    "ValidationError",
    "all_slots",
]
