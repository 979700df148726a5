#!/usr/bin/env python3
"""
Seed a development database with staff, patients and a few bookings.

Run with: python -m clinic_app.seed
"""

from datetime import date, timedelta

from sqlalchemy.orm import Session

from .auth import create_access_token
from .constants import AppointmentStatus, Role
from .database import Base, SessionLocal, engine
from .models import Appointment, Patient, User

STAFF = [
    ("admin@clinic.test", "Clinic Admin", Role.ADMIN),
    ("dr.sharma@clinic.test", "Dr. Priya Sharma", Role.DOCTOR),
    ("dr.okafor@clinic.test", "Dr. Chidi Okafor", Role.DOCTOR),
    ("reception@clinic.test", "Front Desk", Role.RECEPTIONIST),
    ("sam.patient@clinic.test", "Sam Lee", Role.PATIENT),
]

PATIENTS = [
    ("Sam Lee", "+15550100001"),
    ("Maria Garcia", "+15550100002"),
    ("Tom Becker", "+15550100003"),
]


def seed(db: Session, day: date) -> dict:
    """Insert demo rows. Returns the created users keyed by email."""
    users = {}
    for email, name, role in STAFF:
        user = User(email=email, name=name, role=role.value)
        db.add(user)
        users[email] = user
    db.flush()

    patients = []
    for name, contact in PATIENTS:
        patient = Patient(name=name, contact=contact)
        db.add(patient)
        patients.append(patient)
    # The first patient registered themselves
    patients[0].created_by = users["sam.patient@clinic.test"].id
    db.flush()

    doctor = users["dr.sharma@clinic.test"]
    db.add_all(
        [
            Appointment(
                patient_id=patients[0].id,
                doctor_id=doctor.id,
                appointment_date=day,
                time_slot="09:00",
                status=AppointmentStatus.CONFIRMED.value,
            ),
            Appointment(
                patient_id=patients[1].id,
                doctor_id=doctor.id,
                appointment_date=day,
                time_slot="10:30",
                status=AppointmentStatus.PENDING.value,
            ),
            Appointment(
                patient_id=patients[2].id,
                doctor_id=doctor.id,
                appointment_date=day - timedelta(days=1),
                time_slot="14:00",
                status=AppointmentStatus.COMPLETED.value,
            ),
        ]
    )
    db.commit()
    return users


def main():
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        if db.query(User).count():
            print("⚠️ Database already has users, skipping seed")
            return

        print("🌱 Seeding clinic database...\n")
        users = seed(db, date.today() + timedelta(days=1))
        for email, user in users.items():
            token = create_access_token(user.id, Role(user.role))
            print(f"  {user.role:<13} {email:<26} id={user.id}")
            print(f"    token: {token}")
        print("\n✅ Seed complete")
    finally:
        db.close()


if __name__ == "__main__":
    main()
