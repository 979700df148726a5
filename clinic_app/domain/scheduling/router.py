"""Scheduling router - FastAPI endpoints for booking and daily schedules"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, require_roles
from ...constants import Role
from ...database import get_db
from ...shared.validators import is_blank
from .booking_service import BookingService
from .schedule_service import ScheduleService
from .schemas import ApiResponse, AppointmentCreate, AppointmentResponse, AppointmentStatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])

ALL_ROLES = (Role.ADMIN, Role.DOCTOR, Role.RECEPTIONIST, Role.PATIENT)

# Endpoints are plain `def` so blocking store calls run in the threadpool.


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    """Dependency injection for ScheduleService"""
    return ScheduleService(db)


@router.get("/schedule", response_model=ApiResponse)
def get_doctor_schedule(
    doctorId: Optional[str] = Query(None),
    date: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(require_roles(*ALL_ROLES)),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Get every slot of a doctor's day with its availability"""
    schedule = service.resolve(doctorId, date)
    return ApiResponse(success=True, data=[slot.model_dump() for slot in schedule])


@router.get("", response_model=ApiResponse)
def list_appointments(
    doctorId: Optional[str] = Query(None),
    patientId: Optional[str] = Query(None),
    date: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(require_roles(*ALL_ROLES)),
    service: BookingService = Depends(get_booking_service),
):
    """List appointments; patients see only their own and doctors only theirs"""
    if current_user.role == Role.PATIENT:
        patient = service.get_patient_for_user(current_user.userId)
        if patient is None:
            # Self-registered patient without a patient record yet
            return ApiResponse(success=True, data=[])
        patientId = patient.id

    if current_user.role == Role.DOCTOR:
        doctorId = current_user.userId

    appointments = service.list_appointments(doctorId, patientId, date, status)
    return ApiResponse(
        success=True,
        data=[AppointmentResponse.from_model(a).model_dump(mode="json") for a in appointments],
    )


@router.post("", status_code=201, response_model=ApiResponse)
def book_appointment(
    data: AppointmentCreate,
    current_user: CurrentUser = Depends(require_roles(Role.RECEPTIONIST, Role.PATIENT)),
    service: BookingService = Depends(get_booking_service),
):
    """Book a slot with a doctor; patients may only book for their own record"""
    logger.info(f"📥 Booking request from user {current_user.userId} ({current_user.role.value})")
    if current_user.role == Role.PATIENT and not is_blank(data.patientId):
        patient = service.get_patient_for_user(current_user.userId)
        if patient is None or str(data.patientId).strip() != str(patient.id):
            raise HTTPException(status_code=403, detail="Access denied.")

    appointment = service.book(data.patientId, data.doctorId, data.date, data.timeSlot)
    return ApiResponse(
        success=True,
        data=AppointmentResponse.from_model(appointment).model_dump(mode="json"),
        message="Appointment booked successfully.",
    )


@router.put("/{appointment_id}", response_model=ApiResponse)
def update_appointment_status(
    appointment_id: str,
    data: AppointmentStatusUpdate,
    current_user: CurrentUser = Depends(require_roles(Role.DOCTOR, Role.RECEPTIONIST)),
    service: BookingService = Depends(get_booking_service),
):
    """Confirm or complete an appointment"""
    appointment = service.update_status(appointment_id, data.status)
    return ApiResponse(
        success=True,
        data=AppointmentResponse.from_model(appointment).model_dump(mode="json"),
        message="Appointment status updated.",
    )


@router.delete("/{appointment_id}", response_model=ApiResponse)
def cancel_appointment(
    appointment_id: str,
    current_user: CurrentUser = Depends(require_roles(Role.RECEPTIONIST, Role.PATIENT)),
    service: BookingService = Depends(get_booking_service),
):
    """Cancel an appointment; patients may only cancel their own"""
    if current_user.role == Role.PATIENT:
        appointment = service.get_appointment(appointment_id)
        patient = service.get_patient_for_user(current_user.userId)
        if patient is None or appointment.patient_id != patient.id:
            raise HTTPException(status_code=403, detail="Access denied.")

    service.cancel(appointment_id)
    return ApiResponse(success=True, message="Appointment cancelled.")
