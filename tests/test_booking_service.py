"""Tests for booking admission control and staff lifecycle actions."""
from datetime import date
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from clinic_app.domain.scheduling.booking_service import BookingService
from clinic_app.domain.scheduling.errors import (
    ConflictError,
    NotFoundError,
    StoreUnavailable,
    ValidationError,
)
from clinic_app.domain.scheduling.schedule_service import ScheduleService
from clinic_app.models import Appointment

DAY = "2024-06-01"


def _store_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("could not connect to server"))


class TestBookValidation:

    @pytest.mark.parametrize(
        "patient_id,doctor_id,day,slot",
        [
            (None, 1, DAY, "09:00"),
            (1, None, DAY, "09:00"),
            (1, 1, None, "09:00"),
            (1, 1, DAY, None),
            ("", 1, DAY, "09:00"),
            (1, 1, "  ", "09:00"),
        ],
    )
    def test_all_fields_required(self, patient_id, doctor_id, day, slot):
        service = BookingService(Mock())
        service.repo = Mock()

        with pytest.raises(ValidationError, match="All fields required"):
            service.book(patient_id, doctor_id, day, slot)
        assert service.repo.method_calls == []

    @pytest.mark.parametrize("slot", ["25:00", "9:00", "17:00", "09:15"])
    def test_unknown_slot_never_reaches_ledger(self, slot):
        service = BookingService(Mock())
        service.repo = Mock()

        with pytest.raises(ValidationError, match="Invalid time slot"):
            service.book(1, 1, DAY, slot)
        assert service.repo.method_calls == []

    def test_bad_date_rejected(self):
        service = BookingService(Mock())
        service.repo = Mock()

        with pytest.raises(ValidationError):
            service.book(1, 1, "01/06/2024", "09:00")
        assert service.repo.method_calls == []

    @pytest.mark.parametrize(
        "patient_id,doctor_id",
        [("99999999999999999999", 1), (1, 2**31), (2**63, 2**63)],
    )
    def test_ids_beyond_column_range_rejected(self, patient_id, doctor_id):
        service = BookingService(Mock())
        service.repo = Mock()

        with pytest.raises(ValidationError, match="must be valid IDs"):
            service.book(patient_id, doctor_id, DAY, "09:00")
        assert service.repo.method_calls == []

    def test_unknown_patient_rejected(self, db, doctor):
        with pytest.raises(ValidationError, match="Patient not found"):
            BookingService(db).book(9999, doctor.id, DAY, "09:00")

    def test_non_doctor_rejected(self, db, receptionist, patient):
        with pytest.raises(ValidationError, match="Doctor not found"):
            BookingService(db).book(patient.id, receptionist.id, DAY, "09:00")


class TestBook:

    def test_creates_pending_appointment(self, db, doctor, patient):
        appointment = BookingService(db).book(str(patient.id), str(doctor.id), DAY, "10:30")

        assert appointment.id is not None
        assert appointment.status == "pending"
        assert appointment.patient_id == patient.id
        assert appointment.doctor_id == doctor.id
        assert appointment.appointment_date == date(2024, 6, 1)
        assert appointment.time_slot == "10:30"

    def test_second_booking_of_same_key_conflicts(self, db, doctor, patient, other_patient):
        service = BookingService(db)
        service.book(patient.id, doctor.id, DAY, "10:30")

        with pytest.raises(ConflictError, match="already booked"):
            service.book(other_patient.id, doctor.id, DAY, "10:30")
        assert db.query(Appointment).count() == 1

    def test_same_key_conflicts_regardless_of_time_of_day(self, db, doctor, patient, other_patient):
        service = BookingService(db)
        service.book(patient.id, doctor.id, "2024-06-01T08:00:00", "10:30")

        with pytest.raises(ConflictError):
            service.book(other_patient.id, doctor.id, "2024-06-01T17:45:00Z", "10:30")

    def test_unique_constraint_backstops_missed_precheck(self, db, doctor, patient, other_patient):
        service = BookingService(db)
        first = service.book(patient.id, doctor.id, DAY, "10:30")

        # Simulate a racing request whose pre-check ran before the first commit
        service.repo.find_by_key = lambda *args: None

        with pytest.raises(ConflictError):
            service.book(other_patient.id, doctor.id, DAY, "10:30")

        rows = db.query(Appointment).all()
        assert [a.id for a in rows] == [first.id]

    def test_neighbouring_keys_are_independent(self, db, doctor, other_doctor, patient):
        service = BookingService(db)
        service.book(patient.id, doctor.id, DAY, "10:30")
        service.book(patient.id, doctor.id, DAY, "11:00")
        service.book(patient.id, other_doctor.id, DAY, "10:30")
        service.book(patient.id, doctor.id, "2024-06-02", "10:30")

        assert db.query(Appointment).count() == 4

    def test_slot_is_bookable_again_after_cancellation(self, db, doctor, patient, other_patient):
        service = BookingService(db)
        first = service.book(patient.id, doctor.id, DAY, "10:30")
        service.cancel(first.id)

        second = service.book(other_patient.id, doctor.id, DAY, "10:30")
        assert second.patient_id == other_patient.id


class TestStoreFailures:

    def test_lookup_failure_is_store_unavailable(self, db, doctor, monkeypatch):
        monkeypatch.setattr(db, "query", _store_down)

        with pytest.raises(StoreUnavailable):
            ScheduleService(db).resolve(doctor.id, DAY)

    def test_pool_timeout_is_store_unavailable(self, db, doctor, monkeypatch):
        def pool_exhausted(*args, **kwargs):
            raise PoolTimeoutError("QueuePool limit of size 20 overflow 30 reached")

        monkeypatch.setattr(db, "query", pool_exhausted)

        with pytest.raises(StoreUnavailable):
            ScheduleService(db).resolve(doctor.id, DAY)

    def test_failed_commit_is_not_reported_as_booked(self, db, doctor, patient, monkeypatch):
        monkeypatch.setattr(db, "commit", _store_down)

        with pytest.raises(StoreUnavailable):
            BookingService(db).book(patient.id, doctor.id, DAY, "10:30")

        monkeypatch.undo()
        assert db.query(Appointment).count() == 0


class TestStatusUpdates:

    @pytest.fixture
    def appointment(self, db, doctor, patient):
        return BookingService(db).book(patient.id, doctor.id, DAY, "10:30")

    def test_forward_transitions(self, db, appointment):
        service = BookingService(db)

        assert service.update_status(appointment.id, "confirmed").status == "confirmed"
        assert service.update_status(appointment.id, "completed").status == "completed"

    def test_pending_can_skip_to_completed(self, db, appointment):
        assert BookingService(db).update_status(appointment.id, "completed").status == "completed"

    def test_same_status_is_noop(self, db, appointment):
        assert BookingService(db).update_status(appointment.id, "pending").status == "pending"

    def test_backward_transition_rejected(self, db, appointment):
        service = BookingService(db)
        service.update_status(appointment.id, "confirmed")

        with pytest.raises(ValidationError, match="from confirmed to pending"):
            service.update_status(appointment.id, "pending")

    @pytest.mark.parametrize("status", [None, "", "cancelled", "CONFIRMED"])
    def test_invalid_status_rejected(self, db, appointment, status):
        with pytest.raises(ValidationError, match="Valid status required"):
            BookingService(db).update_status(appointment.id, status)

    def test_unknown_appointment(self, db):
        with pytest.raises(NotFoundError):
            BookingService(db).update_status(4242, "confirmed")

    def test_status_visible_in_schedule(self, db, doctor, appointment):
        BookingService(db).update_status(appointment.id, "confirmed")

        schedule = {s.slot: s for s in ScheduleService(db).resolve(doctor.id, DAY)}
        assert schedule["10:30"].occupiedBy.status == "confirmed"


class TestCancelAndList:

    @pytest.mark.parametrize("appointment_id", ["99999999999999999999", 2**31, "abc", 0])
    def test_invalid_appointment_id_is_validation_error(self, db, appointment_id):
        service = BookingService(db)

        with pytest.raises(ValidationError, match="Invalid appointment ID"):
            service.cancel(appointment_id)
        with pytest.raises(ValidationError, match="Invalid appointment ID"):
            service.update_status(appointment_id, "confirmed")
        with pytest.raises(ValidationError, match="Invalid appointment ID"):
            service.get_appointment(appointment_id)

    def test_cancel_unknown_appointment(self, db):
        with pytest.raises(NotFoundError):
            BookingService(db).cancel(4242)

    def test_cancel_deletes_row(self, db, doctor, patient):
        service = BookingService(db)
        appointment = service.book(patient.id, doctor.id, DAY, "10:30")
        service.cancel(appointment.id)
        db.expire_all()

        assert db.query(Appointment).count() == 0

    def test_list_filters_and_orders(self, db, doctor, other_doctor, patient, other_patient):
        service = BookingService(db)
        service.book(patient.id, doctor.id, "2024-06-02", "09:00")
        service.book(other_patient.id, doctor.id, DAY, "15:00")
        service.book(patient.id, doctor.id, DAY, "09:30")
        service.book(patient.id, other_doctor.id, DAY, "09:00")

        listed = service.list_appointments(doctor_id=doctor.id)
        assert [(a.appointment_date.isoformat(), a.time_slot) for a in listed] == [
            ("2024-06-01", "09:30"),
            ("2024-06-01", "15:00"),
            ("2024-06-02", "09:00"),
        ]

        assert len(service.list_appointments(patient_id=patient.id)) == 3
        assert len(service.list_appointments(doctor_id=doctor.id, day=DAY)) == 2
        assert len(service.list_appointments(status="confirmed")) == 0

    def test_list_rejects_bad_filters(self, db):
        service = BookingService(db)
        with pytest.raises(ValidationError):
            service.list_appointments(day="June 1st")
        with pytest.raises(ValidationError):
            service.list_appointments(status="cancelled")
        with pytest.raises(ValidationError, match="must be valid IDs"):
            service.list_appointments(doctor_id="99999999999999999999")

    def test_list_ignores_blank_filters(self, db, doctor, patient, other_patient):
        service = BookingService(db)
        service.book(patient.id, doctor.id, DAY, "09:00")
        service.book(other_patient.id, doctor.id, "2024-06-02", "09:30")

        listed = service.list_appointments(doctor_id="", patient_id="  ", day="", status="")
        assert len(listed) == 2
        assert len(service.list_appointments(doctor_id=str(doctor.id), status=" ")) == 2
