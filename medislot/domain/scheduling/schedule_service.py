"""Schedule service - weekly availability rules for doctors"""

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...auth import Actor
from ...config import DEFAULT_SCHEDULE_END, DEFAULT_SCHEDULE_START, MIN_SCHEDULE_HOURS
from ...models import Doctor, Role, Schedule, ScheduleStatus, Weekday
from ...shared.results import (
    Result,
    Success,
    not_found,
    policy_violation,
    unauthorized,
    validation_error,
)
from ...shared.validators import minutes_of_day, normalize_time, normalize_weekday, weekday_of
from .repository import AppointmentRepository, ScheduleRepository
from .slots import count_slots

logger = logging.getLogger(__name__)

DAY_ORDER = {day.value: index for index, day in enumerate(Weekday)}

CONFLICT_MESSAGE = "Appointment exists on this day. You can't update the schedule."


def default_schedules(doctor: Doctor) -> list[Schedule]:
    """One available row per weekday with the default window"""
    return [
        Schedule(
            doctor=doctor,
            day=day.value,
            start_time=DEFAULT_SCHEDULE_START,
            end_time=DEFAULT_SCHEDULE_END,
            slot_count=count_slots(DEFAULT_SCHEDULE_START, DEFAULT_SCHEDULE_END),
            status=ScheduleStatus.AVAILABLE.value,
        )
        for day in Weekday
    ]


class ScheduleService:
    """Service layer for schedule business logic"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.repo = ScheduleRepository()
        self.clock = clock

    def create_default_schedules(self, doctor: Doctor) -> list[Schedule]:
        """Stage the seven default rows for a new doctor (caller commits)"""
        schedules = default_schedules(doctor)
        self.repo.add_schedules(self.db, schedules)
        return schedules

    def list_schedules(self, actor: Actor, doctor_id: Optional[int] = None) -> Result[list[Schedule]]:
        """Schedules of a doctor, Sunday first"""
        resolved = self._resolve_doctor_id(actor, doctor_id)
        if not resolved.ok:
            return resolved

        schedules = self.repo.get_schedules(self.db, resolved.value)
        return Success(sorted(schedules, key=lambda s: DAY_ORDER.get(s.day, len(DAY_ORDER))))

    def update_schedule(
        self,
        actor: Actor,
        day_name: str,
        start_time: str,
        end_time: str,
        doctor_id: Optional[int] = None,
    ) -> Result[Schedule]:
        """Change the window of one weekday and recompute its slot count"""
        resolved = self._resolve_doctor_id(actor, doctor_id)
        if not resolved.ok:
            return resolved

        try:
            day = normalize_weekday(day_name)
            start_time = normalize_time(start_time)
            end_time = normalize_time(end_time)
        except ValueError as e:
            return validation_error(str(e))

        if minutes_of_day(end_time) - minutes_of_day(start_time) < MIN_SCHEDULE_HOURS * 60:
            return validation_error(
                f"The end time must be at least {MIN_SCHEDULE_HOURS} hours after the start time."
            )

        locked = self._lock_unbooked_day(resolved.value, day)
        if not locked.ok:
            return locked

        schedule = self.repo.update_schedule(
            self.db,
            locked.value,
            start_time=start_time,
            end_time=end_time,
            slot_count=count_slots(start_time, end_time),
        )
        logger.info(
            f"✅ Doctor {resolved.value} {day.value} schedule set to {start_time}-{end_time} "
            f"({schedule.slot_count} slots)"
        )
        return Success(schedule)

    def toggle_status(
        self, actor: Actor, day_name: str, doctor_id: Optional[int] = None
    ) -> Result[Schedule]:
        """Flip a weekday between available and unavailable"""
        resolved = self._resolve_doctor_id(actor, doctor_id)
        if not resolved.ok:
            return resolved

        try:
            day = normalize_weekday(day_name)
        except ValueError as e:
            return validation_error(str(e))

        schedule = self.repo.get_schedule(self.db, resolved.value, day.value, for_update=True)
        if not schedule:
            return not_found("Schedule not found")

        if schedule.status == ScheduleStatus.AVAILABLE.value:
            # Closing a day must not strand existing bookings
            if day.value in self._upcoming_days(resolved.value):
                return policy_violation(CONFLICT_MESSAGE)
            new_status = ScheduleStatus.UNAVAILABLE.value
        else:
            new_status = ScheduleStatus.AVAILABLE.value

        schedule = self.repo.update_schedule(self.db, schedule, status=new_status)
        logger.info(f"✅ Doctor {resolved.value} {day.value} is now {new_status}")
        return Success(schedule)

    def days_with_appointments(
        self, actor: Actor, doctor_id: Optional[int] = None
    ) -> Result[list[str]]:
        """Weekdays that currently have upcoming appointments, Sunday first"""
        resolved = self._resolve_doctor_id(actor, doctor_id)
        if not resolved.ok:
            return resolved

        days = self._upcoming_days(resolved.value)
        return Success(sorted(days, key=DAY_ORDER.__getitem__))

    def _upcoming_days(self, doctor_id: int) -> set[str]:
        dates = AppointmentRepository.get_future_appointment_dates(
            self.db, doctor_id, self.clock().date()
        )
        return {weekday_of(d).value for d in dates}

    def _lock_unbooked_day(self, doctor_id: int, day: Weekday) -> Result[Schedule]:
        schedule = self.repo.get_schedule(self.db, doctor_id, day.value, for_update=True)
        if not schedule:
            return not_found("Schedule not found")

        if day.value in self._upcoming_days(doctor_id):
            logger.warning(f"🚫 Doctor {doctor_id} {day.value} schedule change blocked by appointments")
            return policy_violation(CONFLICT_MESSAGE)
        return Success(schedule)

    def _resolve_doctor_id(self, actor: Actor, doctor_id: Optional[int]) -> Result[int]:
        if actor.role is Role.DOCTOR:
            return Success(actor.doctor_id)
        if actor.role is Role.ADMIN:
            if doctor_id is None:
                return validation_error("Please input doctor id.")
            if not AppointmentRepository.get_doctor(self.db, doctor_id):
                return not_found("The selected doctor does not exist.")
            return Success(doctor_id)
        if actor.role is Role.PATIENT:
            return unauthorized()
        raise ValueError(f"Unhandled role: {actor.role}")
