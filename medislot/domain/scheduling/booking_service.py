"""Booking service - the only mutating entry point for appointments"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import Actor
from ...config import BOOKING_LEAD_DAYS
from ...models import Appointment, AppointmentStatus, Doctor, PaymentStatus, Role
from ...shared.results import (
    Result,
    Success,
    booking_conflict,
    not_found,
    unauthorized,
    validation_error,
)
from ...shared.validators import normalize_time, weekday_of
from ..payments.gate import DatabasePaymentGate, PaymentGate
from . import lifecycle
from .repository import AppointmentRepository, ScheduleRepository
from .slots import SLOT_MINUTES, generate_available_slots

logger = logging.getLogger(__name__)

# Every appointment is billed as one 30-minute unit of the doctor's hourly rate
BILLING_HOURS = SLOT_MINUTES / 60

CONFLICT_MESSAGE = "This slot is no longer available. Please choose another time."


def appointment_amount(doctor: Doctor) -> float:
    return round((doctor.hourly_rate or 0) * BILLING_HOURS, 2)


def is_owner(actor: Actor, appointment: Appointment) -> bool:
    """Whether the actor is the admin, doctor or patient of this appointment"""
    if actor.role is Role.ADMIN:
        return True
    if actor.role is Role.DOCTOR:
        return appointment.doctor_id == actor.doctor_id
    if actor.role is Role.PATIENT:
        return appointment.patient_id == actor.patient_id
    raise ValueError(f"Unhandled role: {actor.role}")


class BookingService:
    """Service layer for creating, changing and closing appointments"""

    def __init__(
        self,
        db: Session,
        payment_gate: Optional[PaymentGate] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db = db
        self.repo = AppointmentRepository()
        self.payment_gate = payment_gate or DatabasePaymentGate(db)
        self.clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def earliest_bookable_date(self) -> date:
        return self.clock().date() + timedelta(days=BOOKING_LEAD_DAYS)

    def available_slots(self, doctor_id: int, appointment_date: date) -> Result[list[str]]:
        """Open slots for a doctor on a date"""
        if appointment_date < self.earliest_bookable_date():
            return validation_error("The appointment date must be at least tomorrow.")

        doctor = self.repo.get_doctor(self.db, doctor_id)
        if not doctor:
            return not_found("The selected doctor does not exist.")

        return Success(generate_available_slots(self.db, doctor, appointment_date))

    def get_appointment(self, actor: Actor, appointment_id: int) -> Result[Appointment]:
        """Get an appointment the actor is party to"""
        return self._get_accessible(
            actor, appointment_id, (Role.ADMIN, Role.DOCTOR, Role.PATIENT)
        )

    def list_appointments(self, actor: Actor) -> list[Appointment]:
        """Appointments visible to the actor"""
        if actor.role is Role.ADMIN:
            return self.repo.list_appointments(self.db)
        if actor.role is Role.DOCTOR:
            return self.repo.list_appointments(self.db, doctor_id=actor.doctor_id)
        if actor.role is Role.PATIENT:
            return self.repo.list_appointments(self.db, patient_id=actor.patient_id)
        raise ValueError(f"Unhandled role: {actor.role}")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_appointment(
        self,
        actor: Actor,
        doctor_id: int,
        appointment_date: date,
        slot: str,
        patient_id: Optional[int] = None,
    ) -> Result[Appointment]:
        """Book an open slot as a pending appointment with an unpaid payment"""
        logger.info(
            f"📥 Booking request by {actor.role.value} {actor.user_id}: "
            f"doctor={doctor_id} date={appointment_date} slot={slot}"
        )

        if actor.role is Role.PATIENT:
            patient_id = actor.patient_id
        elif actor.role is Role.ADMIN:
            if patient_id is None:
                return validation_error("Please input patient id.")
            if not self.repo.get_patient(self.db, patient_id):
                return not_found("The selected patient does not exist.")
        elif actor.role is Role.DOCTOR:
            return unauthorized()
        else:
            raise ValueError(f"Unhandled role: {actor.role}")

        checked = self._check_slot_request(doctor_id, appointment_date, slot)
        if not checked.ok:
            return checked
        doctor, slot = checked.value

        try:
            appointment = self.repo.create_appointment(
                self.db,
                patient_id=patient_id,
                doctor_id=doctor.id,
                appointment_date=appointment_date,
                slot=slot,
                status=AppointmentStatus.PENDING.value,
                amount=appointment_amount(doctor),
                payment_status=PaymentStatus.UNPAID.value,
            )
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                f"⚠️ Lost booking race for doctor={doctor.id} {appointment_date} {slot}"
            )
            return booking_conflict(CONFLICT_MESSAGE)

        logger.info(f"✅ Appointment {appointment.id} created (pending)")
        return Success(appointment)

    def reschedule_appointment(
        self,
        actor: Actor,
        appointment_id: int,
        slot: str,
        appointment_date: Optional[date] = None,
    ) -> Result[Appointment]:
        """Move a pending, unpaid appointment to another open slot"""
        found = self._get_accessible(actor, appointment_id, (Role.ADMIN, Role.PATIENT))
        if not found.ok:
            return found
        appointment = found.value

        rejected = lifecycle.check_reschedulable(
            appointment, self.payment_gate.get_status(appointment)
        )
        if rejected:
            return rejected

        new_date = appointment_date or appointment.appointment_date
        checked = self._check_slot_request(
            appointment.doctor_id, new_date, slot, exclude_appointment_id=appointment.id
        )
        if not checked.ok:
            return checked
        _, slot = checked.value

        try:
            appointment = self.repo.update_appointment(
                self.db, appointment, appointment_date=new_date, slot=slot
            )
        except IntegrityError:
            self.db.rollback()
            return booking_conflict(CONFLICT_MESSAGE)

        logger.info(f"✅ Appointment {appointment.id} rescheduled to {new_date} {slot}")
        return Success(appointment)

    def cancel_appointment(self, actor: Actor, appointment_id: int) -> Result[int]:
        """Cancel (delete) an appointment"""
        found = self._get_accessible(actor, appointment_id, (Role.ADMIN, Role.PATIENT))
        if not found.ok:
            return found
        appointment = found.value

        rejected = lifecycle.check_cancellable(
            appointment,
            self.payment_gate.get_status(appointment),
            admin_override=actor.is_admin,
        )
        if rejected:
            logger.warning(f"🚫 Cancel of appointment {appointment_id} rejected: {rejected.message}")
            return rejected

        self.repo.delete_appointment(self.db, appointment)
        logger.info(f"🗑️ Appointment {appointment_id} cancelled by {actor.role.value} {actor.user_id}")
        return Success(appointment_id)

    def mark_outcome(self, actor: Actor, appointment_id: int, outcome: str) -> Result[Appointment]:
        """Record completed/missed for a booked appointment that has started"""
        found = self._get_accessible(actor, appointment_id, (Role.ADMIN, Role.DOCTOR))
        if not found.ok:
            return found
        appointment = found.value

        rejected = lifecycle.check_outcome(appointment, outcome, self.clock())
        if rejected:
            return rejected

        appointment = self.repo.update_appointment(self.db, appointment, status=outcome)
        logger.info(f"✅ Appointment {appointment.id} marked {outcome}")
        return Success(appointment)

    def confirm_payment(self, appointment_id: int) -> Result[Appointment]:
        """Move a paid appointment from pending to booked"""
        appointment = self.repo.get_appointment(self.db, appointment_id)
        if not appointment:
            return not_found("Appointment not found")

        payment_status = self.payment_gate.get_status(appointment)
        if appointment.status == AppointmentStatus.BOOKED.value and lifecycle.is_paid(payment_status):
            logger.info(f"Appointment {appointment_id} already booked, nothing to do")
            return Success(appointment)

        rejected = lifecycle.check_payment_confirmation(appointment, payment_status)
        if rejected:
            return rejected

        appointment = self.repo.update_appointment(
            self.db, appointment, status=AppointmentStatus.BOOKED.value
        )
        logger.info(f"✅ Appointment {appointment.id} booked after payment")
        return Success(appointment)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_accessible(
        self, actor: Actor, appointment_id: int, roles: tuple[Role, ...]
    ) -> Result[Appointment]:
        # Non-admins get the same answer for missing and foreign appointments
        appointment = self.repo.get_appointment(self.db, appointment_id)
        if actor.role not in roles:
            return unauthorized()
        if appointment is None:
            return not_found("Appointment not found") if actor.is_admin else unauthorized()
        if not is_owner(actor, appointment):
            return unauthorized()
        return Success(appointment)

    def _check_slot_request(
        self,
        doctor_id: int,
        appointment_date: date,
        slot: str,
        exclude_appointment_id: Optional[int] = None,
    ) -> Result[tuple[Doctor, str]]:
        try:
            slot = normalize_time(slot)
        except ValueError as e:
            return validation_error(f"Slot: {e}")

        if appointment_date < self.earliest_bookable_date():
            return validation_error("The appointment date must be at least tomorrow.")

        doctor = self.repo.get_doctor(self.db, doctor_id)
        if not doctor:
            return not_found("The selected doctor does not exist.")

        # Serializes with schedule edits for this weekday where row locks exist
        ScheduleRepository.get_schedule(
            self.db, doctor.id, weekday_of(appointment_date).value, for_update=True
        )
        available = generate_available_slots(
            self.db, doctor, appointment_date, exclude_appointment_id
        )
        if not available:
            return booking_conflict(
                "There are no slots available for this day. Please choose another day."
            )
        if slot not in available:
            return booking_conflict("This slot is not available.")

        return Success((doctor, slot))
