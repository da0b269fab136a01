"""Slot generation - bookable time slots for a doctor on a date"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Doctor, Schedule, ScheduleStatus
from ...shared.validators import format_minutes, minutes_of_day, weekday_of
from .repository import AppointmentRepository, ScheduleRepository

logger = logging.getLogger(__name__)

SLOT_MINUTES = 30


def count_slots(start_time: str, end_time: str) -> int:
    """Number of whole 30-minute slots between two HH:MM times"""
    duration = minutes_of_day(end_time) - minutes_of_day(start_time)
    return max(duration, 0) // SLOT_MINUTES


def candidate_slots(schedule: Schedule) -> list[str]:
    """Every slot of a schedule window, ascending, from its persisted slot_count"""
    start = minutes_of_day(schedule.start_time)
    return [format_minutes(start + i * SLOT_MINUTES) for i in range(schedule.slot_count)]


def generate_available_slots(
    db: Session,
    doctor: Optional[Doctor],
    appointment_date: Optional[date],
    exclude_appointment_id: Optional[int] = None,
) -> list[str]:
    """
    Compute the open slots for a doctor on a calendar date.

    A missing or unavailable schedule for that weekday yields an empty list,
    as does a fully booked day.

    Args:
        db: Database session
        doctor: Doctor to compute slots for
        appointment_date: Calendar date
        exclude_appointment_id: Appointment whose own slot should count as free
            (used when rescheduling it)

    Returns:
        Open HH:MM slots in ascending order
    """
    if doctor is None or appointment_date is None:
        return []

    day = weekday_of(appointment_date)
    schedule = ScheduleRepository.get_schedule(db, doctor.id, day.value)
    if schedule is None or schedule.status != ScheduleStatus.AVAILABLE.value:
        logger.debug(f"No schedule for doctor {doctor.id} on {day.value}")
        return []

    booked = AppointmentRepository.get_booked_slots(
        db, doctor.id, appointment_date, exclude_appointment_id
    )
    return [slot for slot in candidate_slots(schedule) if slot not in booked]
