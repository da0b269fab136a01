"""Payment service - applies gateway callbacks and hands off to booking"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment, PaymentStatus
from ...shared.results import Result, Success, not_found, policy_violation
from ..scheduling.booking_service import BookingService
from .repository import PaymentRepository
from .schemas import PaymentWebhookEvent

logger = logging.getLogger(__name__)


class PaymentService:
    """Service layer for payment gateway events"""

    def __init__(self, db: Session, booking: Optional[BookingService] = None):
        self.db = db
        self.repo = PaymentRepository()
        self.booking = booking or BookingService(db)

    def handle_event(self, event: PaymentWebhookEvent) -> Result[Appointment]:
        """Record the gateway outcome, then let booking move the appointment on"""
        payment = self.repo.get_by_appointment_id(self.db, event.appointment_id)
        if not payment:
            logger.warning(f"⚠️ Payment record not found for appointment {event.appointment_id}")
            return not_found("Payment record not found")

        if event.event == "payment.succeeded":
            if payment.status != PaymentStatus.PAID.value:
                self.repo.update_payment(
                    self.db,
                    payment,
                    status=PaymentStatus.PAID.value,
                    transaction_id=event.transaction_id,
                    payment_method=event.payment_method,
                )
                logger.info(f"💳 Payment for appointment {event.appointment_id} confirmed")
            return self.booking.confirm_payment(event.appointment_id)

        if payment.status == PaymentStatus.PAID.value:
            return policy_violation("Payment already completed")

        self.repo.update_payment(
            self.db,
            payment,
            status=PaymentStatus.FAILED.value,
            transaction_id=event.transaction_id,
            payment_method=event.payment_method,
        )
        logger.warning(f"❌ Payment for appointment {event.appointment_id} failed")
        return Success(payment.appointment)
