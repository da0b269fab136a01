"""Payment router - gateway webhook and payment lookups"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor
from ...config import PAYMENT_WEBHOOK_SECRET
from ...database import get_db
from ...shared.results import unwrap
from ...webhook_security import verify_payment_webhook
from ..scheduling.booking_service import BookingService
from ..scheduling.router import get_booking_service
from .schemas import PaymentResponse, PaymentWebhookEvent, PaymentWebhookResponse
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db)


@router.post("/webhook", response_model=PaymentWebhookResponse)
async def payment_webhook(
    request: Request,
    service: PaymentService = Depends(get_payment_service),
):
    """Signed callback from the payment gateway"""
    raw_body = await verify_payment_webhook(request, PAYMENT_WEBHOOK_SECRET)

    try:
        event = PaymentWebhookEvent.model_validate_json(raw_body)
    except ValidationError as e:
        logger.warning(f"⚠️ Malformed payment webhook: {e}")
        raise HTTPException(status_code=422, detail="Malformed webhook payload") from e

    appointment = unwrap(service.handle_event(event))
    return PaymentWebhookResponse(
        appointment_id=appointment.id,
        appointment_status=appointment.status,
        payment_status=appointment.payment.status,
    )


@router.get("/appointments/{appointment_id}", response_model=PaymentResponse)
async def get_appointment_payment(
    appointment_id: int,
    actor: Actor = Depends(get_current_actor),
    booking: BookingService = Depends(get_booking_service),
):
    """Payment of an appointment the current user can see"""
    appointment = unwrap(booking.get_appointment(actor, appointment_id))
    if appointment.payment is None:
        raise HTTPException(status_code=404, detail="Payment record not found")
    return appointment.payment
