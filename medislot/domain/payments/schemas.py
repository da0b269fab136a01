"""Payment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class PaymentWebhookEvent(BaseModel):
    """Callback body sent by the payment gateway"""

    event: Literal["payment.succeeded", "payment.failed"]
    appointment_id: int
    transaction_id: Optional[str] = None
    payment_method: Optional[str] = None


class PaymentWebhookResponse(BaseModel):
    received: bool = True
    appointment_id: int
    appointment_status: str
    payment_status: str


class PaymentResponse(BaseModel):
    """Schema for payment response"""

    id: int
    appointment_id: int
    amount: float
    status: str
    transaction_id: Optional[str] = None
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
