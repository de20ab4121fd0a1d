# ClinicClock - Dependencies
# FastAPI dependencies for services and protected admin routes

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from clinicclock.database import get_db
from clinicclock.models.admin_user import AdminUser
from clinicclock.services.admin import AdminService
from clinicclock.services.attendance import AttendanceService
from clinicclock.services.mailer import ReportDispatcher
from clinicclock.services.pending import PendingSetupStore
from clinicclock.services.scheduler import ReportScheduler
from clinicclock.services.sessions import AdminSessionService
from clinicclock.services.sync import SafeSync


# Cookie name for admin session token
SESSION_COOKIE_NAME = "clinicclock_admin"


def get_sync(request: Request) -> SafeSync:
    return request.app.state.sync


def get_pending_setups(request: Request) -> PendingSetupStore:
    return request.app.state.pending_setups


def get_dispatcher(request: Request) -> ReportDispatcher:
    return request.app.state.dispatcher


def get_report_scheduler(request: Request) -> Optional[ReportScheduler]:
    """The running report scheduler, or None when disabled."""
    return request.app.state.report_scheduler


def get_attendance_service(
    db: Session = Depends(get_db),
    sync: SafeSync = Depends(get_sync),
) -> AttendanceService:
    return AttendanceService(db, sync)


def get_admin_service(
    db: Session = Depends(get_db),
    sync: SafeSync = Depends(get_sync),
) -> AdminService:
    return AdminService(db, sync)


def get_session_token(request: Request) -> Optional[str]:
    """
    Extract admin session token from request cookies.
    
    Returns None if no session cookie is present.
    """
    return request.cookies.get(SESSION_COOKIE_NAME)


def get_current_admin_optional(
    request: Request,
    db: Session = Depends(get_db),
) -> Optional[AdminUser]:
    """Get the logged-in admin, or None."""
    session_token = get_session_token(request)
    if not session_token:
        return None
    
    return AdminSessionService(db).validate(session_token)


def require_admin(
    admin: Optional[AdminUser] = Depends(get_current_admin_optional),
) -> AdminUser:
    """
    Require a logged-in admin or raise 401.
    
    Usage:
        @router.get("/admin/employees")
        def list_employees(admin: AdminUser = Depends(require_admin)):
            # admin is guaranteed to be authenticated
            ...
    """
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin login required",
        )
    return admin
