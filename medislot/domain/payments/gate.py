"""Payment gate - read-only view of payment state for the booking core"""

from typing import Optional, Protocol

from sqlalchemy.orm import Session

from ...models import Appointment, Payment, PaymentStatus


class PaymentGate(Protocol):
    """Answers whether an appointment has been paid. Never mutates payments."""

    def get_status(self, appointment: Appointment) -> Optional[PaymentStatus]:
        ...


class DatabasePaymentGate:
    """PaymentGate backed by the payments table written by the gateway webhook"""

    def __init__(self, db: Session):
        self.db = db

    def get_status(self, appointment: Appointment) -> Optional[PaymentStatus]:
        payment = self.db.query(Payment).filter(Payment.appointment_id == appointment.id).first()
        if payment is None:
            return None
        return PaymentStatus(payment.status)
