"""Account service - creating doctors and patients"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Doctor, Patient, Role, User
from ..scheduling.schedule_service import ScheduleService
from .repository import AccountRepository
from .schemas import DoctorCreate, PatientCreate

logger = logging.getLogger(__name__)


class AccountService:
    """Service layer for account business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AccountRepository()

    def create_doctor(self, data: DoctorCreate) -> Doctor:
        """Create a doctor with the default weekly schedule"""
        logger.info(f"📥 Creating doctor account for {data.email}")
        user = self._new_user(data.name, data.email, Role.DOCTOR)

        doctor = Doctor(
            user=user,
            specialization=data.specialization,
            hourly_rate=data.hourly_rate,
            bio=data.bio,
        )
        self.db.add(doctor)
        ScheduleService(self.db).create_default_schedules(doctor)
        self._commit(data.email)
        self.db.refresh(doctor)

        logger.info(f"✅ Doctor {doctor.id} created with {len(doctor.schedules)} schedule days")
        return doctor

    def create_patient(self, data: PatientCreate) -> Patient:
        """Create a patient account"""
        logger.info(f"📥 Creating patient account for {data.email}")
        user = self._new_user(data.name, data.email, Role.PATIENT)

        patient = Patient(user=user, phone=data.phone, date_of_birth=data.date_of_birth)
        self.db.add(patient)
        self._commit(data.email)
        self.db.refresh(patient)
        return patient

    def get_doctor(self, doctor_id: int) -> Doctor:
        """Get a specific doctor"""
        doctor = self.repo.get_doctor(self.db, doctor_id)
        if not doctor:
            raise HTTPException(status_code=404, detail="Doctor not found")
        return doctor

    def list_doctors(self, specialization: Optional[str] = None) -> list[Doctor]:
        """List doctors"""
        return self.repo.list_doctors(self.db, specialization)

    def _new_user(self, name: str, email: str, role: Role) -> User:
        if self.repo.get_user_by_email(self.db, email):
            raise HTTPException(status_code=409, detail="Email already registered")
        return self.repo.add_user(self.db, User(name=name, email=email, role=role.value))

    def _commit(self, email: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Account creation for {email} hit a constraint: {e.orig}")
            raise HTTPException(status_code=409, detail="Email already registered") from e
