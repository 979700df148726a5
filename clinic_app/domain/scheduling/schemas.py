"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date as calendar_date
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel


class AppointmentCreate(BaseModel):
    """
    Schema for booking a slot.

    Fields are optional here so that missing values reach the booking
    service, which rejects them with a single readable message.
    """

    patientId: Optional[Union[int, str]] = None
    doctorId: Optional[Union[int, str]] = None
    date: Optional[str] = None
    timeSlot: Optional[str] = None


class AppointmentStatusUpdate(BaseModel):
    status: Optional[str] = None


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: int
    patientId: int
    doctorId: int
    date: calendar_date
    timeSlot: str
    status: str
    patientName: Optional[str] = None
    doctorName: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            patientId=appointment.patient_id,
            doctorId=appointment.doctor_id,
            date=appointment.appointment_date,
            timeSlot=appointment.time_slot,
            status=appointment.status,
            patientName=appointment.patient.name if appointment.patient else None,
            doctorName=appointment.doctor.name if appointment.doctor else None,
            created_at=appointment.created_at,
        )


class SlotOccupant(BaseModel):
    appointmentId: int
    patientName: str
    status: str


class SlotInfo(BaseModel):
    """One row of a doctor's daily timetable"""

    slot: str
    available: bool
    occupiedBy: Optional[SlotOccupant] = None


class ApiResponse(BaseModel):
    """Response envelope shared by all scheduling endpoints"""

    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
