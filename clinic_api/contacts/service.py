"""
Contact Message Service
"""
from sqlalchemy.orm import Session, Query
import logging

from ..exceptions import NotFoundException
from .models import ContactMessage, ContactStatus
from .schemas import ContactMessageCreate

# Set up logging
logger = logging.getLogger(__name__)


class ContactMessageNotFoundException(NotFoundException):
    default_detail = "Contact message not found"


def submit_contact_message(db: Session, data: ContactMessageCreate) -> ContactMessage:
    message = ContactMessage(
        name=data.name,
        email=data.email,
        subject=data.subject,
        message=data.message,
        status=ContactStatus.UNREAD
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.info(f"Contact message {message.id} received")
    return message


def all_contact_messages_query(db: Session) -> Query:
    """Newest first."""
    return db.query(ContactMessage).order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())


def get_contact_message(db: Session, message_id: int) -> ContactMessage:
    message = db.query(ContactMessage).filter(ContactMessage.id == message_id).first()
    if not message:
        raise ContactMessageNotFoundException()
    return message


def update_contact_status(db: Session, message_id: int, status: ContactStatus) -> ContactMessage:
    message = get_contact_message(db, message_id)
    message.status = status
    db.commit()
    db.refresh(message)
    logger.info(f"Contact message {message_id} marked {status.value}")
    return message


def delete_contact_message(db: Session, message_id: int) -> None:
    message = get_contact_message(db, message_id)
    db.delete(message)
    db.commit()
    logger.info(f"Contact message {message_id} deleted")
