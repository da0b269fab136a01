"""Account router - FastAPI endpoints for doctor and patient accounts"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor, require_roles
from ...database import get_db
from ...models import Doctor, Patient, Role
from .schemas import DoctorCreate, DoctorResponse, PatientCreate, PatientResponse
from .service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["Accounts"])


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    """Dependency injection for AccountService"""
    return AccountService(db)


def doctor_response(doctor: Doctor) -> DoctorResponse:
    return DoctorResponse(
        id=doctor.id,
        user_id=doctor.user_id,
        name=doctor.user.name,
        email=doctor.user.email,
        specialization=doctor.specialization,
        hourly_rate=doctor.hourly_rate,
        bio=doctor.bio,
    )


def patient_response(patient: Patient) -> PatientResponse:
    return PatientResponse(
        id=patient.id,
        user_id=patient.user_id,
        name=patient.user.name,
        email=patient.user.email,
        phone=patient.phone,
        date_of_birth=patient.date_of_birth,
    )


@router.post("/doctors", response_model=DoctorResponse, status_code=201)
async def create_doctor(
    data: DoctorCreate,
    actor: Actor = Depends(require_roles(Role.ADMIN)),
    service: AccountService = Depends(get_account_service),
):
    """Create a doctor account (seeds the weekly schedule)"""
    return doctor_response(service.create_doctor(data))


@router.post("/patients", response_model=PatientResponse, status_code=201)
async def create_patient(
    data: PatientCreate,
    actor: Actor = Depends(require_roles(Role.ADMIN)),
    service: AccountService = Depends(get_account_service),
):
    """Create a patient account"""
    return patient_response(service.create_patient(data))


@router.get("/doctors", response_model=list[DoctorResponse])
async def list_doctors(
    specialization: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    service: AccountService = Depends(get_account_service),
):
    """List doctors"""
    return [doctor_response(d) for d in service.list_doctors(specialization)]


@router.get("/doctors/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(
    doctor_id: int,
    actor: Actor = Depends(get_current_actor),
    service: AccountService = Depends(get_account_service),
):
    """Get a doctor"""
    return doctor_response(service.get_doctor(doctor_id))
