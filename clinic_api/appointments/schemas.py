"""
Appointment Schemas - Pydantic models for appointment validation and serialization.
"""
import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, EmailStr, Field, validator

from ..core.phone import parse_phone
from .models import AppointmentStatus, DEFAULT_REASON

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class AppointmentCreate(BaseModel):
    """
    Appointment booking payload, shared by signed-in and public bookings

    Fields:
    - name, phone, email, date, time: required
    - gender, age, notes: optional
    - reason: defaults to "General Consultation"
    """
    name: str = Field(..., min_length=1)
    gender: Optional[str] = None
    age: Optional[int] = Field(None, gt=0, le=150)
    phone: str
    email: EmailStr
    date: datetime.date
    time: str = Field(..., pattern=TIME_PATTERN, description="Time of day in HH:MM")
    reason: Optional[str] = DEFAULT_REASON
    notes: Optional[str] = None

    @validator("phone")
    def clean_phone(cls, v):
        phone = parse_phone(v)
        if phone is None:
            raise ValueError("Phone number is required")
        return phone

    @validator("date")
    def date_not_in_past(cls, v):
        if v < datetime.date.today():
            raise ValueError("Appointment date cannot be in the past")
        return v

    @validator("reason")
    def default_reason(cls, v):
        return v.strip() if v and v.strip() else DEFAULT_REASON

    class Config:
        """Configuration for Pydantic model"""
        json_schema_extra = {
            "example": {
                "name": "Jane Doe",
                "gender": "female",
                "age": 34,
                "phone": "9876543210",
                "email": "jane@example.com",
                "date": "2030-01-15",
                "time": "10:30",
                "reason": "General Consultation"
            }
        }


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AdminAppointmentUpdate(BaseModel):
    """
    Administrative appointment update - any subset of fields, including status and doctor
    """
    doctor_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1)
    gender: Optional[str] = None
    age: Optional[int] = Field(None, gt=0, le=150)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    date: Optional[datetime.date] = None
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    status: Optional[AppointmentStatus] = None
    reason: Optional[str] = None
    notes: Optional[str] = None

    @validator("phone")
    def clean_phone(cls, v):
        return parse_phone(v)


class AppointmentResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    doctor_id: Optional[int] = None
    name: str
    gender: Optional[str] = None
    age: Optional[int] = None
    phone: str
    email: str
    date: datetime.date
    time: str
    status: AppointmentStatus
    reason: str
    notes: Optional[str] = None
    created_at: Optional[datetime.datetime] = None

    class Config:
        """Configuration for Pydantic model to enable ORM mode"""
        from_attributes = True


def serialize_appointment(appointment) -> Dict[str, Any]:
    return AppointmentResponse.model_validate(appointment).model_dump(mode="json")
