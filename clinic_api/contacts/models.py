"""
Contact Message Model - Messages submitted through the public contact form.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, func
import enum
from ..database import Base


class ContactStatus(str, enum.Enum):
    UNREAD = "unread"
    READ = "read"
    REPLIED = "replied"


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    status = Column(Enum(ContactStatus, values_callable=lambda statuses: [s.value for s in statuses], name="contact_status"),
                    nullable=False, default=ContactStatus.UNREAD, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<ContactMessage(id={self.id}, email='{self.email}', status='{self.status}')>"
