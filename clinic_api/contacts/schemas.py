"""
Contact Message Schemas
"""
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, EmailStr, Field, validator

from .models import ContactStatus


class ContactMessageCreate(BaseModel):
    """
    Contact form payload

    Fields:
    - name, email, subject: required
    - message: at least 10 characters
    """
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=10, max_length=5000)

    @validator("name", "subject", "message")
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be blank")
        return v.strip()


class ContactStatusUpdate(BaseModel):
    status: ContactStatus


class ContactMessageResponse(BaseModel):
    id: int
    name: str
    email: str
    subject: str
    message: str
    status: ContactStatus
    created_at: Optional[datetime] = None

    class Config:
        """Configuration for Pydantic model to enable ORM mode"""
        from_attributes = True


def serialize_contact_message(message) -> Dict[str, Any]:
    return ContactMessageResponse.model_validate(message).model_dump(mode="json")
