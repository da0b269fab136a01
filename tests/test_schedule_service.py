"""Tests for the schedule service."""

import pytest

from medislot.domain.scheduling.booking_service import BookingService
from medislot.domain.scheduling.schedule_service import CONFLICT_MESSAGE, ScheduleService
from medislot.models import Schedule, ScheduleStatus
from medislot.shared.results import FailureKind

WEEK = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


@pytest.fixture
def schedules(db) -> ScheduleService:
    return ScheduleService(db)


@pytest.fixture
def monday_booking(db, doctor, patient_actor, next_monday):
    result = BookingService(db).create_appointment(patient_actor, doctor.id, next_monday, "10:00")
    assert result.ok
    return result.value


class TestDefaultSchedules:
    def test_new_doctor_gets_a_full_week(self, db, doctor):
        rows = db.query(Schedule).filter(Schedule.doctor_id == doctor.id).all()

        assert sorted(r.day for r in rows) == sorted(WEEK)
        for row in rows:
            assert (row.start_time, row.end_time) == ("10:00", "17:00")
            assert row.slot_count == 14
            assert row.status == ScheduleStatus.AVAILABLE.value

    def test_listed_sunday_first(self, schedules, doctor_actor):
        result = schedules.list_schedules(doctor_actor)

        assert [s.day for s in result.value] == WEEK


class TestUpdateSchedule:
    def test_window_change_recomputes_slots(self, schedules, doctor_actor):
        result = schedules.update_schedule(doctor_actor, "monday", "09:00", "12:00")

        assert result.ok
        assert result.value.day == "Monday"
        assert result.value.slot_count == 6

    def test_window_must_span_two_hours(self, schedules, doctor_actor):
        result = schedules.update_schedule(doctor_actor, "Monday", "09:00", "10:30")

        assert result.kind is FailureKind.VALIDATION

    def test_end_before_start(self, schedules, doctor_actor):
        result = schedules.update_schedule(doctor_actor, "Monday", "15:00", "09:00")

        assert result.kind is FailureKind.VALIDATION

    def test_malformed_time(self, schedules, doctor_actor):
        result = schedules.update_schedule(doctor_actor, "Monday", "9am", "17:00")

        assert result.kind is FailureKind.VALIDATION

    def test_unknown_day(self, schedules, doctor_actor):
        result = schedules.update_schedule(doctor_actor, "Funday", "09:00", "17:00")

        assert result.kind is FailureKind.VALIDATION
        assert result.message == "This is not a valid day"

    def test_day_with_upcoming_booking_is_locked(self, db, schedules, doctor_actor, monday_booking):
        """A booked Monday keeps its window until the appointment is gone."""
        result = schedules.update_schedule(doctor_actor, "Monday", "09:00", "12:00")

        assert result.kind is FailureKind.POLICY_VIOLATION
        assert result.message == CONFLICT_MESSAGE
        monday = db.query(Schedule).filter(Schedule.day == "Monday").one()
        assert (monday.start_time, monday.end_time, monday.slot_count) == ("10:00", "17:00", 14)

    def test_other_days_stay_editable(self, schedules, doctor_actor, monday_booking):
        result = schedules.update_schedule(doctor_actor, "Tuesday", "09:00", "12:00")

        assert result.ok

    def test_shrunk_window_limits_booking(self, db, schedules, doctor, doctor_actor, next_monday):
        schedules.update_schedule(doctor_actor, "Monday", "09:00", "11:00")

        slots = BookingService(db).available_slots(doctor.id, next_monday).value

        assert slots == ["09:00", "09:30", "10:00", "10:30"]


class TestToggleStatus:
    def test_closes_and_reopens_day(self, schedules, doctor_actor):
        closed = schedules.toggle_status(doctor_actor, "Friday")
        assert closed.value.status == ScheduleStatus.UNAVAILABLE.value

        reopened = schedules.toggle_status(doctor_actor, "Friday")
        assert reopened.value.status == ScheduleStatus.AVAILABLE.value

    def test_cannot_close_booked_day(self, schedules, doctor_actor, monday_booking):
        result = schedules.toggle_status(doctor_actor, "Monday")

        assert result.kind is FailureKind.POLICY_VIOLATION
        assert result.message == CONFLICT_MESSAGE

    def test_cancelling_unlocks_day(self, db, schedules, doctor_actor, patient_actor, monday_booking):
        BookingService(db).cancel_appointment(patient_actor, monday_booking.id)

        result = schedules.toggle_status(doctor_actor, "Monday")

        assert result.ok


class TestDaysWithAppointments:
    def test_lists_booked_weekdays(self, schedules, doctor_actor, monday_booking):
        assert schedules.days_with_appointments(doctor_actor).value == ["Monday"]

    def test_empty_without_bookings(self, schedules, doctor_actor):
        assert schedules.days_with_appointments(doctor_actor).value == []


class TestDoctorResolution:
    def test_admin_names_the_doctor(self, schedules, doctor, admin_actor):
        result = schedules.update_schedule(admin_actor, "Monday", "08:00", "12:00", doctor.id)

        assert result.ok
        assert result.value.doctor_id == doctor.id

    def test_admin_without_doctor(self, schedules, admin_actor):
        assert schedules.list_schedules(admin_actor).kind is FailureKind.VALIDATION

    def test_admin_with_unknown_doctor(self, schedules, admin_actor):
        assert schedules.list_schedules(admin_actor, 9999).kind is FailureKind.NOT_FOUND

    def test_patient_is_unauthorized(self, schedules, patient_actor, doctor):
        assert schedules.toggle_status(patient_actor, "Monday", doctor.id).kind is FailureKind.AUTHORIZATION

    def test_doctor_only_touches_own_schedule(self, db, schedules, doctor, doctor_actor):
        """A doctor id passed by a doctor is ignored in favour of their own."""
        from medislot.auth import actor_for_user

        from tests.conftest import make_doctor

        other = make_doctor(db, email="wilson@example.com")

        schedules.toggle_status(actor_for_user(other.user), "Monday", doctor.id)

        mine = db.query(Schedule).filter_by(doctor_id=doctor.id, day="Monday").one()
        theirs = db.query(Schedule).filter_by(doctor_id=other.id, day="Monday").one()
        assert mine.status == ScheduleStatus.AVAILABLE.value
        assert theirs.status == ScheduleStatus.UNAVAILABLE.value
