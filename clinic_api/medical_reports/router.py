"""
Medical Report Router - endpoints for a user's own reports.
"""
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import get_current_user
from ..auth.models import User
from .schemas import ReportCreate, ReportUpdate, serialize_report
from .service import (
    create_report,
    list_user_reports,
    get_user_report,
    update_user_report,
    delete_user_report,
    get_report_stats,
    get_report_abnormalities
)

router = APIRouter(prefix="/reports", tags=["Medical Reports"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_my_report(
    report_data: ReportCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    report = create_report(db, current_user.id, report_data)
    return {
        "success": True,
        "message": "Medical report created successfully",
        "report": serialize_report(report)
    }


@router.get("")
async def list_my_reports(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    reports = list_user_reports(db, current_user.id)
    return {
        "success": True,
        "count": len(reports),
        "reports": [serialize_report(r) for r in reports]
    }


# Declared before /{report_id} so "stats" is not parsed as an id
@router.get("/stats")
async def my_report_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    """
    Report counts by type and month, plus the five most recent reports
    """
    return {"success": True, "stats": get_report_stats(db, current_user.id)}


@router.get("/{report_id}")
async def get_my_report(
    report_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    report = get_user_report(db, report_id, current_user.id)
    return {"success": True, "report": serialize_report(report)}


@router.put("/{report_id}")
async def update_my_report(
    report_id: int,
    report_data: ReportUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    report = update_user_report(db, report_id, current_user.id, report_data)
    return {
        "success": True,
        "message": "Medical report updated successfully",
        "report": serialize_report(report)
    }


@router.delete("/{report_id}")
async def delete_my_report(
    report_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    delete_user_report(db, report_id, current_user.id)
    return {"success": True, "message": "Medical report deleted successfully"}


@router.get("/{report_id}/abnormalities")
async def my_report_abnormalities(
    report_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    """
    Result entries outside their reference range
    """
    result = get_report_abnormalities(db, report_id, current_user.id)
    result["success"] = True
    return result
