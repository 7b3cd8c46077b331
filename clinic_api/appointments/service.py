"""
Appointment Service - Business logic for booking and managing appointments.
"""
from typing import List, Optional
from sqlalchemy.orm import Session, Query
import logging

from ..exceptions import ForbiddenException, NotFoundException, ValidationException
from .models import Appointment, AppointmentStatus
from .schemas import AppointmentCreate, AdminAppointmentUpdate

# Set up logging
logger = logging.getLogger(__name__)


class AppointmentNotFoundException(NotFoundException):
    default_detail = "Appointment not found"


def create_appointment(db: Session, data: AppointmentCreate, user_id: Optional[int] = None) -> Appointment:
    """
    Book an appointment.

    Args:
        db: Database session
        data: Validated booking payload
        user_id: Booking identity, or None for a public booking

    Returns:
        Appointment: The new appointment, always pending
    """
    appointment = Appointment(
        user_id=user_id,
        status=AppointmentStatus.PENDING,
        **data.model_dump()
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    logger.info(f"Appointment {appointment.id} booked ({'user ' + str(user_id) if user_id else 'public'}) for {appointment.date} {appointment.time}")
    return appointment


def list_user_appointments(db: Session, user_id: int) -> List[Appointment]:
    """All appointments of one identity, newest date and time first."""
    return (
        db.query(Appointment)
        .filter(Appointment.user_id == user_id)
        .order_by(Appointment.date.desc(), Appointment.time.desc())
        .all()
    )


def get_appointment(db: Session, appointment_id: int) -> Appointment:
    """
    Get an appointment by ID.

    Raises:
        AppointmentNotFoundException: If no appointment has this id
    """
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if not appointment:
        raise AppointmentNotFoundException()
    return appointment


def get_user_appointment(db: Session, appointment_id: int, user_id: int) -> Appointment:
    """
    Get an appointment that belongs to ``user_id``.

    Someone else's appointment is reported as not found.
    """
    appointment = (
        db.query(Appointment)
        .filter(Appointment.id == appointment_id, Appointment.user_id == user_id)
        .first()
    )
    if not appointment:
        raise AppointmentNotFoundException("Appointment not found or not authorized")
    return appointment


def update_appointment_status(db: Session, appointment_id: int, status: AppointmentStatus, user_id: int) -> Appointment:
    """
    Change the status of the caller's own appointment.

    Raises:
        AppointmentNotFoundException: If the appointment does not exist
        ForbiddenException: If it was booked by someone else or publicly
    """
    appointment = get_appointment(db, appointment_id)
    if not appointment.is_owned_by(user_id):
        raise ForbiddenException("Not authorized to update this appointment")

    appointment.status = status
    db.commit()
    db.refresh(appointment)
    logger.info(f"Appointment {appointment_id} status set to {status.value} by user {user_id}")
    return appointment


def cancel_appointment(db: Session, appointment_id: int, user_id: int) -> Appointment:
    """
    Cancel the caller's own pending appointment.

    Raises:
        AppointmentNotFoundException: If the appointment does not exist
        ForbiddenException: If it was booked by someone else or publicly
        ValidationException: If it is no longer pending
    """
    appointment = get_appointment(db, appointment_id)
    if not appointment.is_owned_by(user_id):
        raise ForbiddenException("Not authorized to cancel this appointment")
    if appointment.status != AppointmentStatus.PENDING:
        raise ValidationException("Only pending appointments can be cancelled")

    appointment.status = AppointmentStatus.CANCELLED
    db.commit()
    db.refresh(appointment)
    logger.info(f"Appointment {appointment_id} cancelled by user {user_id}")
    return appointment

# ============================================================================
# ADMINISTRATION
# ============================================================================

def all_appointments_query(db: Session) -> Query:
    return db.query(Appointment).order_by(Appointment.created_at.desc(), Appointment.id.desc())


def update_appointment(db: Session, appointment_id: int, data: AdminAppointmentUpdate) -> Appointment:
    """
    Apply an administrative partial update.

    Raises:
        AppointmentNotFoundException: If the appointment does not exist
        ValidationException: If a required field is explicitly cleared
    """
    appointment = get_appointment(db, appointment_id)
    changes = data.model_dump(exclude_unset=True)

    for field in ("name", "phone", "email", "date", "time", "status", "reason"):
        if field in changes and changes[field] is None:
            raise ValidationException(f"{field} cannot be empty")

    for key, value in changes.items():
        setattr(appointment, key, value)

    db.commit()
    db.refresh(appointment)
    logger.info(f"Appointment {appointment_id} updated by admin: fields={sorted(changes)}")
    return appointment


def delete_appointment(db: Session, appointment_id: int) -> None:
    appointment = get_appointment(db, appointment_id)
    db.delete(appointment)
    db.commit()
    logger.info(f"Appointment {appointment_id} deleted")
