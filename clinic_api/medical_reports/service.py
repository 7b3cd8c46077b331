"""
Medical Report Service - CRUD scoped to the owning identity, plus admin access.
"""
from typing import Any, Dict, List
from sqlalchemy.orm import Session, Query
import logging

from ..auth.registry import IdentityRegistry
from ..exceptions import NotFoundException, ValidationException
from .analysis import report_statistics, find_abnormal_values
from .models import MedicalReport
from .schemas import ReportCreate, ReportUpdate, AdminReportCreate

# Set up logging
logger = logging.getLogger(__name__)


class ReportNotFoundException(NotFoundException):
    default_detail = "Report not found"


def create_report(db: Session, user_id: int, data: ReportCreate) -> MedicalReport:
    """
    Record a report for an identity.

    Args:
        db: Database session
        user_id: Owner of the report
        data: Validated report payload

    Returns:
        MedicalReport: The stored report
    """
    report = MedicalReport(
        user_id=user_id,
        category=data.category,
        date=data.date,
        results=data.results,
        attachments=data.attachments,
        notes=data.notes
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info(f"Medical report {report.id} ({report.category.value}) created for user {user_id}")
    return report


def _user_reports_query(db: Session, user_id: int) -> Query:
    return (
        db.query(MedicalReport)
        .filter(MedicalReport.user_id == user_id)
        .order_by(MedicalReport.date.desc(), MedicalReport.id.desc())
    )


def list_user_reports(db: Session, user_id: int) -> List[MedicalReport]:
    return _user_reports_query(db, user_id).all()


def get_user_report(db: Session, report_id: int, user_id: int) -> MedicalReport:
    """
    Get a report owned by ``user_id``. Other identities' reports are not found.
    """
    report = (
        db.query(MedicalReport)
        .filter(MedicalReport.id == report_id, MedicalReport.user_id == user_id)
        .first()
    )
    if not report:
        raise ReportNotFoundException()
    return report


def _apply_update(db: Session, report: MedicalReport, data: ReportUpdate) -> MedicalReport:
    changes = data.model_dump(exclude_unset=True)
    for field in ("category", "date"):
        if field in changes and changes[field] is None:
            raise ValidationException(f"{field} cannot be empty")

    for key, value in changes.items():
        setattr(report, key, value)

    db.commit()
    db.refresh(report)
    logger.info(f"Medical report {report.id} updated: fields={sorted(changes)}")
    return report


def update_user_report(db: Session, report_id: int, user_id: int, data: ReportUpdate) -> MedicalReport:
    report = get_user_report(db, report_id, user_id)
    return _apply_update(db, report, data)


def delete_user_report(db: Session, report_id: int, user_id: int) -> None:
    report = get_user_report(db, report_id, user_id)
    db.delete(report)
    db.commit()
    logger.info(f"Medical report {report_id} deleted by user {user_id}")


def get_report_stats(db: Session, user_id: int) -> Dict[str, Any]:
    return report_statistics(list_user_reports(db, user_id))


def get_report_abnormalities(db: Session, report_id: int, user_id: int) -> Dict[str, Any]:
    """
    Abnormal values of one of the caller's reports.

    Returns:
        Dict with report_id, report_type and the abnormal entries
    """
    report = get_user_report(db, report_id, user_id)
    return {
        "report_id": report.id,
        "report_type": report.category.value,
        "abnormalities": find_abnormal_values(report.results),
    }

# ============================================================================
# ADMINISTRATION
# ============================================================================

def create_report_for_user(db: Session, data: AdminReportCreate) -> MedicalReport:
    """
    Record a report on behalf of an identity.

    Raises:
        UserNotFoundException: If the identity does not exist
    """
    IdentityRegistry(db).get_or_404(data.user_id)
    return create_report(db, data.user_id, data)


def all_reports_query(db: Session) -> Query:
    return db.query(MedicalReport).order_by(MedicalReport.created_at.desc(), MedicalReport.id.desc())


def get_report(db: Session, report_id: int) -> MedicalReport:
    report = db.query(MedicalReport).filter(MedicalReport.id == report_id).first()
    if not report:
        raise ReportNotFoundException("Medical report not found")
    return report


def update_report(db: Session, report_id: int, data: ReportUpdate) -> MedicalReport:
    return _apply_update(db, get_report(db, report_id), data)


def delete_report(db: Session, report_id: int) -> None:
    report = get_report(db, report_id)
    db.delete(report)
    db.commit()
    logger.info(f"Medical report {report_id} deleted by admin")
