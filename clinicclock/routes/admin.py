# ClinicClock - Admin Routes
# Admin login, employee and holiday management, attendance reports

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from clinicclock.config import get_settings
from clinicclock.database import get_db
from clinicclock.dependencies import (
    SESSION_COOKIE_NAME,
    get_admin_service,
    get_attendance_service,
    get_dispatcher,
    get_report_scheduler,
    require_admin,
)
from clinicclock.models.admin_user import AdminUser
from clinicclock.schemas import (
    AdminLoginRequest,
    AttendanceRecordOut,
    EmployeeCreate,
    EmployeeOut,
    HolidayCreate,
    HolidayOut,
    ReportSendRequest,
    ScheduleOut,
)
from clinicclock.services.admin import AdminService
from clinicclock.services.attendance import AttendanceService
from clinicclock.services.mailer import ReportDispatcher
from clinicclock.services.outcomes import AdminLoginSuccess
from clinicclock.services.report import build_filename, generate_csv
from clinicclock.services.scheduler import IDLE, ReportScheduler
from clinicclock.services.sessions import AdminSessionService


settings = get_settings()

router = APIRouter(prefix="/admin", tags=["admin"])


def bad_request(e: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def not_found(e: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# =============================================================================
# Login
# =============================================================================

@router.post("/login")
def login(
    payload: AdminLoginRequest,
    attendance: AttendanceService = Depends(get_attendance_service),
    db: Session = Depends(get_db),
):
    """
    Log an admin in and set the session cookie.
    
    Unknown username and wrong password get the same 401 response.
    """
    outcome = attendance.login_admin(payload.username, payload.password)
    
    if not isinstance(outcome, AdminLoginSuccess):
        return JSONResponse({"outcome": outcome.tag}, status_code=401)
    
    session = AdminSessionService(db).create(outcome.admin)
    
    response = JSONResponse({"outcome": outcome.tag, "username": outcome.admin.username})
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session.session_token,
        httponly=True,  # Not accessible via JavaScript
        samesite="strict",
        max_age=60 * settings.session_expire_minutes,
    )
    return response


@router.post("/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    """End the admin session and clear the cookie."""
    session_token = request.cookies.get(SESSION_COOKIE_NAME)
    if session_token:
        AdminSessionService(db).end(session_token)
    
    response = JSONResponse({"outcome": "logged_out"})
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


# =============================================================================
# Employee Management
# =============================================================================

@router.get("/employees", response_model=list[EmployeeOut])
def list_employees(
    admin: AdminUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.list_employees()


@router.post("/employees", response_model=EmployeeOut, status_code=201)
def create_employee(
    payload: EmployeeCreate,
    admin: AdminUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Add an employee. They start on the default password."""
    try:
        return service.add_employee(payload.name)
    except ValueError as e:
        raise bad_request(e)


@router.delete("/employees/{employee_id}", status_code=204)
def delete_employee(
    employee_id: str,
    admin: AdminUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Remove an employee along with all their attendance records."""
    try:
        service.remove_employee(employee_id)
    except ValueError as e:
        raise not_found(e)
    return Response(status_code=204)


@router.post("/employees/{employee_id}/reset-password", response_model=EmployeeOut)
def reset_employee_password(
    employee_id: str,
    admin: AdminUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Put the employee back on the default password."""
    try:
        return service.reset_employee_password(employee_id)
    except ValueError as e:
        raise not_found(e)


# =============================================================================
# Public Holidays
# =============================================================================

@router.get("/holidays", response_model=list[HolidayOut])
def list_holidays(
    admin: AdminUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.list_public_holidays()


@router.post("/holidays", response_model=HolidayOut, status_code=201)
def create_holiday(
    payload: HolidayCreate,
    admin: AdminUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    try:
        return service.add_public_holiday(payload.holiday_date, payload.name)
    except ValueError as e:
        raise bad_request(e)


@router.delete("/holidays/{holiday_id}", status_code=204)
def delete_holiday(
    holiday_id: str,
    admin: AdminUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    try:
        service.remove_public_holiday(holiday_id)
    except ValueError as e:
        raise not_found(e)
    return Response(status_code=204)


# =============================================================================
# Attendance and Reports
# =============================================================================

def parse_range(start: Optional[date], end: Optional[date]) -> tuple[date, date]:
    """Default to today; a lone start or end means that single day."""
    if start is None and end is None:
        start = end = date.today()
    start = start or end
    end = end or start
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Start date must not be after end date",
        )
    return start, end


@router.get("/attendance", response_model=list[AttendanceRecordOut])
def list_attendance(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    admin: AdminUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    start, end = parse_range(start, end)
    return service.attendance_for_range(start, end)


@router.get("/reports/attendance.csv")
def download_report(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    admin: AdminUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """The attendance report for a date range as a CSV download."""
    start, end = parse_range(start, end)
    payload = generate_csv(service.attendance_for_range(start, end))
    
    return Response(
        content=payload,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{build_filename(start, end)}"',
        },
    )


@router.post("/reports/send")
def send_report(
    payload: ReportSendRequest,
    admin: AdminUser = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
    dispatcher: ReportDispatcher = Depends(get_dispatcher),
):
    """Email the report for a date range now."""
    start, end = parse_range(payload.start, payload.end)
    csv_payload = generate_csv(service.attendance_for_range(start, end))
    sent = dispatcher.send(start, end, csv_payload)
    return {"sent": sent}


@router.get("/reports/schedule", response_model=ScheduleOut)
def report_schedule(
    admin: AdminUser = Depends(require_admin),
    scheduler: Optional[ReportScheduler] = Depends(get_report_scheduler),
):
    """Whether the daily report is armed, and when it fires next."""
    if scheduler is None:
        return ScheduleOut(state=IDLE)
    return ScheduleOut(state=scheduler.state, next_run=scheduler.next_run)
