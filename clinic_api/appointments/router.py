"""
Appointment Router - booking endpoints for patients and public visitors.

Administrative endpoints live under /api/admin/appointments.
"""
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import get_current_user
from ..auth.models import User
from .schemas import AppointmentCreate, AppointmentStatusUpdate, serialize_appointment
from .service import (
    create_appointment,
    list_user_appointments,
    get_user_appointment,
    update_appointment_status,
    cancel_appointment
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def book_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    """
    Book an appointment for the signed-in user
    """
    appointment = create_appointment(db, appointment_data, user_id=current_user.id)
    return {
        "success": True,
        "message": "Appointment booked successfully",
        "appointment": serialize_appointment(appointment)
    }


@router.post("/public", status_code=status.HTTP_201_CREATED)
async def book_public_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Request an appointment without an account
    """
    appointment = create_appointment(db, appointment_data)
    return {
        "success": True,
        "message": "Appointment request submitted successfully! Our team will contact you shortly.",
        "appointment": serialize_appointment(appointment)
    }


@router.get("")
async def list_my_appointments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    appointments = list_user_appointments(db, current_user.id)
    return {
        "success": True,
        "count": len(appointments),
        "appointments": [serialize_appointment(a) for a in appointments]
    }


@router.get("/{appointment_id}")
async def get_my_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    appointment = get_user_appointment(db, appointment_id, current_user.id)
    return {"success": True, "appointment": serialize_appointment(appointment)}


@router.put("/{appointment_id}/status")
async def change_appointment_status(
    appointment_id: int,
    status_data: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    appointment = update_appointment_status(db, appointment_id, status_data.status, current_user.id)
    return {
        "success": True,
        "message": "Appointment updated successfully",
        "appointment": serialize_appointment(appointment)
    }


@router.put("/{appointment_id}/cancel")
async def cancel_my_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    """
    Cancel a pending appointment
    """
    appointment = cancel_appointment(db, appointment_id, current_user.id)
    return {
        "success": True,
        "message": "Appointment cancelled successfully",
        "appointment": serialize_appointment(appointment)
    }
