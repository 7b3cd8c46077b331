"""
Admin Router - administrator-only management of identities, appointments,
medical reports and contact messages.

Every route depends on ``require_admin``, which re-reads the caller's role
from the database.
"""
from typing import Dict, Any
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import require_admin
from ..auth.models import User
from ..auth.schemas import AdminUserCreate, AdminUserUpdate, UserResponse
from ..core.pagination import PageParams, PageResponse, paginate
from ..appointments.schemas import AdminAppointmentUpdate, AppointmentResponse, serialize_appointment
from ..appointments import service as appointment_service
from ..medical_reports.schemas import AdminReportCreate, ReportUpdate, ReportResponse, serialize_report
from ..medical_reports import service as report_service
from ..contacts.schemas import ContactMessageResponse
from ..contacts import service as contact_service
from . import service as admin_service

router = APIRouter(prefix="/admin", tags=["Administration"])

# ============================================================================
# USERS
# ============================================================================

@router.get("/users", response_model=PageResponse[UserResponse])
async def list_users(
    page_params: PageParams = Depends(),
    include_admins: bool = Query(False, description="Also list administrator accounts"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Get a paginated list of users, newest first. Administrators are hidden unless asked for.
    """
    return admin_service.list_users(db, page_params, include_admins=include_admins)


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: AdminUserCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    return await admin_service.create_user(db, user_data, admin, request=request)


@router.get("/users/{user_id}")
async def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    return admin_service.get_user(db, user_id)


@router.put("/users/{user_id}")
async def update_user(
    user_id: int,
    user_data: AdminUserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    """
    Update any profile field of a user, including role
    """
    return await admin_service.update_user(db, user_id, user_data, admin, request=request)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    return await admin_service.delete_user(db, user_id, admin, request=request)

# ============================================================================
# APPOINTMENTS
# ============================================================================

@router.get("/appointments", response_model=PageResponse[AppointmentResponse])
async def list_appointments(
    page_params: PageParams = Depends(),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return paginate(appointment_service.all_appointments_query(db), page_params, AppointmentResponse)


@router.get("/appointments/{appointment_id}")
async def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    appointment = appointment_service.get_appointment(db, appointment_id)
    return {"success": True, "appointment": serialize_appointment(appointment)}


@router.put("/appointments/{appointment_id}")
async def update_appointment(
    appointment_id: int,
    appointment_data: AdminAppointmentUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    appointment = appointment_service.update_appointment(db, appointment_id, appointment_data)
    return {
        "success": True,
        "message": "Appointment updated successfully",
        "appointment": serialize_appointment(appointment)
    }


@router.delete("/appointments/{appointment_id}")
async def delete_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    appointment_service.delete_appointment(db, appointment_id)
    return {"success": True, "message": "Appointment deleted successfully"}

# ============================================================================
# MEDICAL REPORTS
# ============================================================================

@router.get("/reports", response_model=PageResponse[ReportResponse])
async def list_reports(
    page_params: PageParams = Depends(),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return paginate(report_service.all_reports_query(db), page_params, ReportResponse)


@router.post("/reports", status_code=status.HTTP_201_CREATED)
async def create_report(
    report_data: AdminReportCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    """
    Record a report on behalf of a user
    """
    report = report_service.create_report_for_user(db, report_data)
    return {
        "success": True,
        "message": "Medical report created successfully",
        "report": serialize_report(report)
    }


@router.get("/reports/{report_id}")
async def get_report(
    report_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    return {"success": True, "report": serialize_report(report_service.get_report(db, report_id))}


@router.put("/reports/{report_id}")
async def update_report(
    report_id: int,
    report_data: ReportUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    report = report_service.update_report(db, report_id, report_data)
    return {
        "success": True,
        "message": "Medical report updated successfully",
        "report": serialize_report(report)
    }


@router.delete("/reports/{report_id}")
async def delete_report(
    report_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    report_service.delete_report(db, report_id)
    return {"success": True, "message": "Medical report deleted successfully"}

# ============================================================================
# CONTACT MESSAGES
# ============================================================================

@router.get("/contact-messages", response_model=PageResponse[ContactMessageResponse])
async def list_contact_messages(
    page_params: PageParams = Depends(),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return paginate(contact_service.all_contact_messages_query(db), page_params, ContactMessageResponse)


@router.delete("/contact-messages/{message_id}")
async def delete_contact_message(
    message_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
) -> Dict[str, Any]:
    contact_service.delete_contact_message(db, message_id)
    return {"success": True, "message": "Contact message deleted successfully"}
