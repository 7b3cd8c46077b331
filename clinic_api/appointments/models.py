"""
Appointment Model - Stores appointment requests and their lifecycle.

Appointments booked while signed in carry the booking identity's id; public
bookings have none. The id is a plain column so deleting an identity leaves
its appointments in place.
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, func
import enum
from ..database import Base

DEFAULT_REASON = "General Consultation"


class AppointmentStatus(str, enum.Enum):
    """Enum for appointment status"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Appointment(Base):
    """
    Appointment Model - Stores appointment information

    Fields:
    - id: Primary key for appointment
    - user_id: Identity that booked it (None for public bookings)
    - doctor_id: Identity of the assigned doctor, if any
    - name, gender, age, phone, email: Patient details as entered
    - date: Day of the appointment
    - time: Time of day in HH:MM
    - status: pending, confirmed, cancelled or completed
    - reason: Reason for the appointment
    - notes: Additional notes about the appointment
    - created_at: When the appointment was created
    """
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=True, index=True)
    doctor_id = Column(Integer, nullable=True)
    name = Column(String, nullable=False)
    gender = Column(String, nullable=True)
    age = Column(Integer, nullable=True)
    phone = Column(String, nullable=False)
    email = Column(String, nullable=False)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)
    status = Column(Enum(AppointmentStatus, values_callable=lambda statuses: [s.value for s in statuses], name="appointment_status"),
                    nullable=False, default=AppointmentStatus.PENDING)
    reason = Column(String, nullable=False, default=DEFAULT_REASON)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        """String representation of the Appointment model"""
        return f"<Appointment(id={self.id}, user_id={self.user_id}, date='{self.date}', time='{self.time}', status='{self.status}')>"

    def is_owned_by(self, user_id: int) -> bool:
        return self.user_id is not None and self.user_id == user_id
