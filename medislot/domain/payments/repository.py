"""Payment repository - Database operations for gateway-side payment updates"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Payment


class PaymentRepository:
    """Repository for payment database operations"""

    @staticmethod
    def get_by_appointment_id(db: Session, appointment_id: int) -> Optional[Payment]:
        """Get the payment of an appointment"""
        return db.query(Payment).filter(Payment.appointment_id == appointment_id).first()

    @staticmethod
    def update_payment(db: Session, payment: Payment, **updates) -> Payment:
        """Update a payment with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(payment, key):
                setattr(payment, key, value)

        db.commit()
        db.refresh(payment)
        return payment
