"""
Medical Report Schemas - Pydantic models for report validation and serialization.
"""
import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field

from .models import ReportCategory


class ReportCreate(BaseModel):
    """
    Report payload

    Fields:
    - category: blood-test or gut-test
    - date: Day the test was taken
    - results: Test name to value; a value may be {"value": ..., "min": ..., "max": ...}
    - attachments: Attachment URLs
    - notes: Free text
    """
    category: ReportCategory
    date: datetime.date
    results: Dict[str, Any] = Field(default_factory=dict)
    attachments: List[str] = Field(default_factory=list)
    notes: Optional[str] = None

    class Config:
        """Configuration for Pydantic model"""
        json_schema_extra = {
            "example": {
                "category": "blood-test",
                "date": "2024-03-01",
                "results": {
                    "hemoglobin": {"value": 13.5, "min": 12, "max": 16},
                    "notes_from_lab": "fasting sample"
                },
                "attachments": [],
                "notes": "Routine check"
            }
        }


class AdminReportCreate(ReportCreate):
    """Report created by an administrator on behalf of an identity"""
    user_id: int


class ReportUpdate(BaseModel):
    category: Optional[ReportCategory] = None
    date: Optional[datetime.date] = None
    results: Optional[Dict[str, Any]] = None
    attachments: Optional[List[str]] = None
    notes: Optional[str] = None


class ReportResponse(BaseModel):
    id: int
    user_id: int
    category: ReportCategory
    date: datetime.date
    results: Optional[Dict[str, Any]] = None
    attachments: Optional[List[str]] = None
    notes: Optional[str] = None
    created_at: Optional[datetime.datetime] = None

    class Config:
        """Configuration for Pydantic model to enable ORM mode"""
        from_attributes = True


def serialize_report(report) -> Dict[str, Any]:
    return ReportResponse.model_validate(report).model_dump(mode="json")
