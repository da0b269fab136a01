"""Scheduling router - FastAPI endpoints for slots, appointments and schedules"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor, require_roles
from ...database import get_db
from ...models import Appointment, Role
from ...shared.results import unwrap
from .booking_service import BookingService
from .schedule_service import ScheduleService
from .schemas import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentStatusUpdate,
    CancelResponse,
    ScheduleResponse,
    ScheduleUpdate,
)

logger = logging.getLogger(__name__)

slots_router = APIRouter(prefix="/slots", tags=["Slots"])
appointments_router = APIRouter(prefix="/appointments", tags=["Appointments"])
schedules_router = APIRouter(prefix="/schedules", tags=["Schedules"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    """Dependency injection for ScheduleService"""
    return ScheduleService(db)


def to_response(appointment: Appointment) -> AppointmentResponse:
    payment = appointment.payment
    return AppointmentResponse(
        id=appointment.id,
        doctor_id=appointment.doctor_id,
        doctor_name=appointment.doctor.user.name if appointment.doctor else None,
        patient_id=appointment.patient_id,
        patient_name=appointment.patient.user.name if appointment.patient else None,
        appointment_date=appointment.appointment_date,
        slot=appointment.slot,
        status=appointment.status,
        payment_status=payment.status if payment else None,
        amount=payment.amount if payment else None,
        created_at=appointment.created_at,
    )


# ============================================================================
# SLOTS
# ============================================================================


@slots_router.get("", response_model=list[str])
async def get_available_slots(
    doctor_id: int = Query(...),
    appointment_date: date = Query(...),
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.PATIENT)),
    service: BookingService = Depends(get_booking_service),
):
    """Open 30-minute slots of a doctor on a date (empty when none)"""
    return unwrap(service.available_slots(doctor_id, appointment_date))


# ============================================================================
# APPOINTMENTS
# ============================================================================


@appointments_router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    actor: Actor = Depends(get_current_actor),
    service: BookingService = Depends(get_booking_service),
):
    """Appointments of the current user (all of them for admins)"""
    return [to_response(a) for a in service.list_appointments(actor)]


@appointments_router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.PATIENT)),
    service: BookingService = Depends(get_booking_service),
):
    """Book an open slot; the appointment starts as pending"""
    appointment = unwrap(
        service.create_appointment(
            actor, data.doctor_id, data.appointment_date, data.slot, data.patient_id
        )
    )
    return to_response(appointment)


@appointments_router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    actor: Actor = Depends(get_current_actor),
    service: BookingService = Depends(get_booking_service),
):
    """View an appointment"""
    return to_response(unwrap(service.get_appointment(actor, appointment_id)))


@appointments_router.put("/{appointment_id}", response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: int,
    data: AppointmentReschedule,
    actor: Actor = Depends(get_current_actor),
    service: BookingService = Depends(get_booking_service),
):
    """Move an unpaid appointment to another slot"""
    appointment = unwrap(
        service.reschedule_appointment(actor, appointment_id, data.slot, data.appointment_date)
    )
    return to_response(appointment)


@appointments_router.delete("/{appointment_id}", response_model=CancelResponse)
async def cancel_appointment(
    appointment_id: int,
    actor: Actor = Depends(get_current_actor),
    service: BookingService = Depends(get_booking_service),
):
    """Cancel an appointment"""
    cancelled_id = unwrap(service.cancel_appointment(actor, appointment_id))
    return CancelResponse(message="Appointment deleted successfully", appointment_id=cancelled_id)


@appointments_router.put("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    data: AppointmentStatusUpdate,
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.DOCTOR)),
    service: BookingService = Depends(get_booking_service),
):
    """Mark a booked appointment completed or missed"""
    return to_response(unwrap(service.mark_outcome(actor, appointment_id, data.status)))


# ============================================================================
# SCHEDULES
# ============================================================================


@schedules_router.get("", response_model=list[ScheduleResponse])
async def list_schedules(
    doctor_id: Optional[int] = Query(None, description="Required for admins"),
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.DOCTOR)),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Weekly schedule, Sunday first"""
    return unwrap(service.list_schedules(actor, doctor_id))


@schedules_router.get("/days-with-appointments", response_model=list[str])
async def days_with_appointments(
    doctor_id: Optional[int] = Query(None, description="Required for admins"),
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.DOCTOR)),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Weekdays locked by upcoming appointments"""
    return unwrap(service.days_with_appointments(actor, doctor_id))


@schedules_router.put("/{day_name}", response_model=ScheduleResponse)
async def update_schedule(
    day_name: str,
    data: ScheduleUpdate,
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.DOCTOR)),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Change the start and end time of one weekday"""
    return unwrap(
        service.update_schedule(actor, day_name, data.start_time, data.end_time, data.doctor_id)
    )


@schedules_router.put("/{day_name}/toggle-status", response_model=ScheduleResponse)
async def toggle_schedule_status(
    day_name: str,
    doctor_id: Optional[int] = Query(None, description="Required for admins"),
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.DOCTOR)),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Switch a weekday between available and unavailable"""
    return unwrap(service.toggle_status(actor, day_name, doctor_id))
