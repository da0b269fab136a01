"""Account repository - Database operations for users, doctors and patients"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Doctor, Patient, User


class AccountRepository:
    """Repository for account database operations"""

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_doctor(db: Session, doctor_id: int) -> Optional[Doctor]:
        """Get a doctor with its user"""
        return (
            db.query(Doctor)
            .options(joinedload(Doctor.user))
            .filter(Doctor.id == doctor_id)
            .first()
        )

    @staticmethod
    def list_doctors(db: Session, specialization: Optional[str] = None) -> list[Doctor]:
        """List doctors, optionally filtered by specialization"""
        query = db.query(Doctor).options(joinedload(Doctor.user))
        if specialization:
            query = query.filter(Doctor.specialization.ilike(f"%{specialization}%"))
        return query.order_by(Doctor.id).all()

    @staticmethod
    def add_user(db: Session, user: User) -> User:
        """Stage a user and flush so profile rows can reference it"""
        db.add(user)
        db.flush()
        return user
