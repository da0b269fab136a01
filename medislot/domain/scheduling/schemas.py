"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import normalize_time


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment"""

    doctor_id: int
    appointment_date: date
    slot: str
    patient_id: Optional[int] = None  # required when an admin books

    @field_validator("slot")
    @classmethod
    def validate_slot(cls, v):
        return normalize_time(v)


class AppointmentReschedule(BaseModel):
    """Schema for moving an appointment; date defaults to the current one"""

    appointment_date: Optional[date] = None
    slot: str

    @field_validator("slot")
    @classmethod
    def validate_slot(cls, v):
        return normalize_time(v)


class AppointmentStatusUpdate(BaseModel):
    """Schema for recording an appointment outcome"""

    status: str


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: int
    doctor_id: int
    doctor_name: Optional[str] = None
    patient_id: int
    patient_name: Optional[str] = None
    appointment_date: date
    slot: str
    status: str
    payment_status: Optional[str] = None
    amount: Optional[float] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CancelResponse(BaseModel):
    message: str
    appointment_id: int


class ScheduleUpdate(BaseModel):
    """Schema for changing one weekday's window"""

    start_time: str
    end_time: str
    doctor_id: Optional[int] = None  # required when an admin edits


class ScheduleResponse(BaseModel):
    """Schema for schedule response"""

    day: str
    start_time: str
    end_time: str
    slot_count: int
    status: str

    class Config:
        from_attributes = True
