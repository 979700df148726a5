from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .constants import AppointmentStatus
from .database import Base

BOOKING_KEY_CONSTRAINT = "uq_appointments_booking_key"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, index=True)  # admin, doctor, receptionist, patient
    created_at = Column(DateTime, server_default=func.now())

    appointments = relationship("Appointment", back_populates="doctor")


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    contact = Column(String(50), nullable=True)
    # Set when the patient registered themselves; links the login to the record
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())

    appointments = relationship("Appointment", back_populates="patient")


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # Hard backstop against double-booking; the service pre-check only gives a friendlier error
        UniqueConstraint("doctor_id", "appointment_date", "time_slot", name=BOOKING_KEY_CONSTRAINT),
    )

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    appointment_date = Column(Date, nullable=False)  # day granularity, time of day discarded
    time_slot = Column(String(5), nullable=False)  # HH:MM label from the slot grid
    status = Column(String(20), nullable=False, default=AppointmentStatus.PENDING.value)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    patient = relationship("Patient", back_populates="appointments")
    doctor = relationship("User", back_populates="appointments")
