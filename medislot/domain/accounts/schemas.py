"""Account domain schemas - Pydantic models for validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email


class DoctorCreate(BaseModel):
    """Schema for creating a doctor account"""

    name: str
    email: str
    specialization: Optional[str] = None
    hourly_rate: float = Field(ge=0)
    bio: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class PatientCreate(BaseModel):
    """Schema for creating a patient account"""

    name: str
    email: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class DoctorResponse(BaseModel):
    id: int
    user_id: int
    name: str
    email: str
    specialization: Optional[str] = None
    hourly_rate: float
    bio: Optional[str] = None


class PatientResponse(BaseModel):
    id: int
    user_id: int
    name: str
    email: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
