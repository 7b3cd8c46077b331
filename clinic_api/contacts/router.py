"""
Contact Router - public contact form and its admin inbox.
"""
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import require_admin
from ..auth.models import User
from ..core.pagination import PageParams, PageResponse, paginate
from .schemas import (
    ContactMessageCreate,
    ContactStatusUpdate,
    ContactMessageResponse,
    serialize_contact_message
)
from .service import (
    submit_contact_message,
    all_contact_messages_query,
    update_contact_status,
    delete_contact_message
)

router = APIRouter(prefix="/contact", tags=["Contact"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_message(
    message_data: ContactMessageCreate,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Submit the public contact form
    """
    message = submit_contact_message(db, message_data)
    return {
        "success": True,
        "message": "Your message has been sent successfully. We will get back to you soon.",
        "data": serialize_contact_message(message)
    }


@router.get("", response_model=PageResponse[ContactMessageResponse])
async def list_messages(
    page_params: PageParams = Depends(),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return paginate(all_contact_messages_query(db), page_params, ContactMessageResponse)


@router.put("/{message_id}/status")
async def change_message_status(
    message_id: int,
    status_data: ContactStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
) -> Dict[str, Any]:
    message = update_contact_status(db, message_id, status_data.status)
    return {
        "success": True,
        "message": "Contact message status updated successfully",
        "data": serialize_contact_message(message)
    }


@router.delete("/{message_id}")
async def remove_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
) -> Dict[str, Any]:
    delete_contact_message(db, message_id)
    return {"success": True, "message": "Contact message deleted successfully"}
