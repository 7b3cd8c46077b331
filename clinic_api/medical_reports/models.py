"""
Medical Report Model - Test results recorded for an identity.
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, JSON, func
import enum
from ..database import Base


class ReportCategory(str, enum.Enum):
    """Enum for report categories"""
    BLOOD_TEST = "blood-test"
    GUT_TEST = "gut-test"


class MedicalReport(Base):
    """
    Medical Report Model

    Fields:
    - id: Primary key
    - user_id: Identity the report belongs to (plain column, survives identity deletion)
    - category: blood-test or gut-test
    - date: Day the test was taken
    - results: Free-form mapping of test name to value, or to {value, min, max}
    - attachments: List of attachment URLs
    - notes: Free text
    - created_at: When the report was recorded
    """
    __tablename__ = "medical_reports"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    category = Column(Enum(ReportCategory, values_callable=lambda categories: [c.value for c in categories], name="report_category"),
                      nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    results = Column(JSON, nullable=True)
    attachments = Column(JSON, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<MedicalReport(id={self.id}, user_id={self.user_id}, category='{self.category}', date='{self.date}')>"
