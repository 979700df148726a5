"""Shared enumerations for roles and appointment lifecycle"""

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    RECEPTIONIST = "receptionist"
    PATIENT = "patient"


class AppointmentStatus(str, Enum):
    """Appointment lifecycle. Cancellation deletes the row, there is no cancelled state."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"


# Forward-only lifecycle order: pending -> confirmed -> completed
STATUS_ORDER = {
    AppointmentStatus.PENDING: 0,
    AppointmentStatus.CONFIRMED: 1,
    AppointmentStatus.COMPLETED: 2,
}
