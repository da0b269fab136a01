"""
Appointment lifecycle - status transitions and the guards around them.

    pending --(payment confirmed)--> booked --(doctor)--> completed | missed

Cancellation deletes the row and is checked by ``check_cancellable``.
Statuses only ever move forward along this table.
"""

from datetime import datetime
from typing import Optional

from ...models import Appointment, AppointmentStatus, PaymentStatus
from ...shared.results import Failure, policy_violation, validation_error

TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.BOOKED}),
    AppointmentStatus.BOOKED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.MISSED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.MISSED: frozenset(),
}

OUTCOMES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.MISSED})

PAID_MESSAGE = "Appointment is already paid. Please contact support to change it."
COMPLETED_MESSAGE = "Cannot change an already completed appointment."


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return target in TRANSITIONS[current]


def appointment_start(appointment: Appointment) -> datetime:
    """Local start datetime of an appointment"""
    hours, minutes = appointment.slot.split(":")
    return datetime.combine(appointment.appointment_date, datetime.min.time()).replace(
        hour=int(hours), minute=int(minutes)
    )


def is_paid(payment_status: Optional[PaymentStatus]) -> bool:
    return payment_status is PaymentStatus.PAID


def check_transition(current: AppointmentStatus, target: AppointmentStatus) -> Optional[Failure]:
    """Reject any move that is not an edge of the transition table"""
    if can_transition(current, target):
        return None
    if not TRANSITIONS[current]:
        return policy_violation(f"Appointment is already {current.value} and cannot change.")
    if current is AppointmentStatus.PENDING and target in OUTCOMES:
        return policy_violation("Appointment has not been paid yet, so it cannot be marked.")
    return policy_violation(f"Cannot change appointment status from {current.value} to {target.value}.")


def parse_outcome(value: str) -> Optional[AppointmentStatus]:
    try:
        status = AppointmentStatus(value)
    except ValueError:
        return None
    return status if status in OUTCOMES else None


def check_outcome(appointment: Appointment, outcome: str, now: datetime) -> Optional[Failure]:
    """Guard for recording completed/missed on an appointment"""
    target = parse_outcome(outcome)
    if target is None:
        return validation_error("The status must be updated to either completed or missed.")

    if appointment_start(appointment) > now:
        return policy_violation("You cannot update the appointment status for a future date.")

    return check_transition(AppointmentStatus(appointment.status), target)


def check_payment_confirmation(
    appointment: Appointment, payment_status: Optional[PaymentStatus]
) -> Optional[Failure]:
    """Guard for pending -> booked"""
    if not is_paid(payment_status):
        return policy_violation("Payment has not been confirmed for this appointment.")
    return check_transition(AppointmentStatus(appointment.status), AppointmentStatus.BOOKED)


def check_reschedulable(
    appointment: Appointment, payment_status: Optional[PaymentStatus]
) -> Optional[Failure]:
    """Date/slot can change only while pending and unpaid"""
    status = AppointmentStatus(appointment.status)
    if status is AppointmentStatus.COMPLETED:
        return policy_violation(COMPLETED_MESSAGE)
    if status is not AppointmentStatus.PENDING or is_paid(payment_status):
        return policy_violation(PAID_MESSAGE)
    return None


def check_cancellable(
    appointment: Appointment, payment_status: Optional[PaymentStatus], admin_override: bool
) -> Optional[Failure]:
    """Patients cancel pending unpaid appointments; admins anything not completed"""
    status = AppointmentStatus(appointment.status)
    if status is AppointmentStatus.COMPLETED:
        return policy_violation(COMPLETED_MESSAGE)
    if admin_override:
        return None
    if status is not AppointmentStatus.PENDING or is_paid(payment_status):
        return policy_violation(PAID_MESSAGE)
    return None
