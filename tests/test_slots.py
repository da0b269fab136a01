"""Tests for slot generation."""
from datetime import timedelta

from medislot.domain.scheduling.booking_service import BookingService
from medislot.domain.scheduling.repository import ScheduleRepository
from medislot.domain.scheduling.slots import count_slots, generate_available_slots
from medislot.models import ScheduleStatus

FULL_DAY = [
    "10:00", "10:30", "11:00", "11:30", "12:00", "12:30", "13:00",
    "13:30", "14:00", "14:30", "15:00", "15:30", "16:00", "16:30",
]


class TestCountSlots:
    def test_default_window(self):
        assert count_slots("10:00", "17:00") == 14

    def test_partial_slot_is_dropped(self):
        assert count_slots("09:15", "11:40") == 4

    def test_inverted_window_has_no_slots(self):
        assert count_slots("12:00", "11:00") == 0


class TestGenerateAvailableSlots:
    def test_open_day_returns_every_slot(self, db, doctor, next_monday):
        """A fresh default schedule yields 14 slots from 10:00 to 16:30."""
        slots = generate_available_slots(db, doctor, next_monday)

        assert slots == FULL_DAY

    def test_booked_slot_is_removed(self, db, doctor, patient_actor, next_monday):
        BookingService(db).create_appointment(patient_actor, doctor.id, next_monday, "11:00")

        slots = generate_available_slots(db, doctor, next_monday)

        assert len(slots) == 13
        assert "11:00" not in slots
        assert slots == [s for s in FULL_DAY if s != "11:00"]

    def test_bookings_on_other_dates_do_not_count(self, db, doctor, patient_actor, next_monday):
        BookingService(db).create_appointment(
            patient_actor, doctor.id, next_monday + timedelta(days=7), "11:00"
        )

        assert generate_available_slots(db, doctor, next_monday) == FULL_DAY

    def test_unavailable_schedule_returns_empty(self, db, doctor, next_monday):
        schedule = ScheduleRepository.get_schedule(db, doctor.id, "Monday")
        ScheduleRepository.update_schedule(db, schedule, status=ScheduleStatus.UNAVAILABLE.value)

        assert generate_available_slots(db, doctor, next_monday) == []

    def test_missing_schedule_row_returns_empty(self, db, doctor, next_monday):
        schedule = ScheduleRepository.get_schedule(db, doctor.id, "Monday")
        db.delete(schedule)
        db.commit()

        assert generate_available_slots(db, doctor, next_monday) == []

    def test_missing_doctor_or_date_returns_empty(self, db, doctor, next_monday):
        assert generate_available_slots(db, None, next_monday) == []
        assert generate_available_slots(db, doctor, None) == []

    def test_fully_booked_day_returns_empty(self, db, doctor, patient_actor, next_monday):
        schedule = ScheduleRepository.get_schedule(db, doctor.id, "Monday")
        ScheduleRepository.update_schedule(db, schedule, slot_count=2)
        service = BookingService(db)
        service.create_appointment(patient_actor, doctor.id, next_monday, "10:00")
        service.create_appointment(patient_actor, doctor.id, next_monday, "10:30")

        assert generate_available_slots(db, doctor, next_monday) == []

    def test_uses_persisted_slot_count(self, db, doctor, next_monday):
        """slot_count is not recomputed from the window on every call."""
        schedule = ScheduleRepository.get_schedule(db, doctor.id, "Monday")
        ScheduleRepository.update_schedule(db, schedule, slot_count=3)

        assert generate_available_slots(db, doctor, next_monday) == ["10:00", "10:30", "11:00"]

    def test_excluded_appointment_frees_its_slot(self, db, doctor, patient_actor, next_monday):
        appointment = BookingService(db).create_appointment(
            patient_actor, doctor.id, next_monday, "11:00"
        ).value

        slots = generate_available_slots(
            db, doctor, next_monday, exclude_appointment_id=appointment.id
        )

        assert slots == FULL_DAY
