# ClinicClock - Kiosk Routes
# Clock-in, first-time password setup and clock-out from the shared tablet

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from clinicclock.dependencies import (
    get_admin_service,
    get_attendance_service,
    get_pending_setups,
)
from clinicclock.schemas import (
    AttendanceRecordOut,
    ClockOutcomeOut,
    ClockRequest,
    KioskEmployeeOut,
    PasswordSetupRequest,
)
from clinicclock.services.admin import AdminService
from clinicclock.services.attendance import AttendanceService
from clinicclock.services.outcomes import (
    ClockInAlreadyClockedIn,
    ClockInRequiresPasswordSetup,
    ClockInSuccess,
    ClockOutSuccess,
)
from clinicclock.services.passwords import validate_new_password
from clinicclock.services.pending import PendingSetupStore


router = APIRouter(tags=["kiosk"])


def outcome_response(outcome, setup_token: str | None = None) -> JSONResponse:
    """
    Render a clock-in/out outcome.
    
    Wrong password is a 401 so simple clients can branch on status;
    every other outcome is a 200 carrying its tag.
    """
    body = ClockOutcomeOut(outcome=outcome.tag, setup_token=setup_token)
    
    if isinstance(outcome, (ClockInSuccess, ClockOutSuccess)):
        body.record = AttendanceRecordOut.model_validate(outcome.record)
    elif isinstance(outcome, ClockInAlreadyClockedIn):
        body.record = AttendanceRecordOut.model_validate(outcome.existing)
    elif isinstance(outcome, ClockInRequiresPasswordSetup):
        body.employee_name = outcome.employee.name
    
    status_code = 401 if outcome.tag == "wrong_password" else 200
    return JSONResponse(body.model_dump(mode="json"), status_code=status_code)


@router.get("/employees", response_model=list[KioskEmployeeOut])
def list_kiosk_employees(
    admin_service: AdminService = Depends(get_admin_service),
    attendance: AttendanceService = Depends(get_attendance_service),
):
    """Employee buttons for the kiosk, with whether each is clocked in today."""
    today = datetime.now().date()
    employees = []
    for employee in admin_service.list_employees():
        record = attendance.todays_record(employee.id, today)
        employees.append(
            KioskEmployeeOut(
                id=employee.id,
                name=employee.name,
                clocked_in=record is not None and record.is_open,
            )
        )
    return employees


@router.post("/clock-in")
def clock_in(
    payload: ClockRequest,
    attendance: AttendanceService = Depends(get_attendance_service),
    pending: PendingSetupStore = Depends(get_pending_setups),
):
    """
    Clock an employee in.
    
    A first-time employee gets outcome "requires_password_setup" and a
    setup_token; nothing is saved until POST /clock-in/setup.
    """
    outcome = attendance.clock_in(payload.employee_id, payload.password)
    
    if isinstance(outcome, ClockInRequiresPasswordSetup):
        return outcome_response(outcome, setup_token=pending.put(outcome))
    
    return outcome_response(outcome)


@router.post("/clock-in/setup")
def complete_password_setup(
    payload: PasswordSetupRequest,
    attendance: AttendanceService = Depends(get_attendance_service),
    pending: PendingSetupStore = Depends(get_pending_setups),
):
    """
    Set a personal password and record the held clock-in.
    
    If the employee clocked in through another setup in the meantime the
    outcome is "already_clocked_in" and nothing is written. Any other
    stale setup is a 404 and the employee has to clock in again.
    """
    if pending.peek(payload.setup_token) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Password setup expired, please clock in again",
        )
    
    problems = validate_new_password(payload.new_password)
    if problems:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="; ".join(problems),
        )
    
    held = pending.take(payload.setup_token)
    if held is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Password setup expired, please clock in again",
        )
    
    try:
        outcome = attendance.complete_setup_and_clock_in(
            held.employee,
            held.pending_record,
            payload.new_password,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    
    return outcome_response(outcome)


@router.post("/clock-out")
def clock_out(
    payload: ClockRequest,
    attendance: AttendanceService = Depends(get_attendance_service),
):
    """Clock an employee out of today's shift."""
    outcome = attendance.clock_out(payload.employee_id, payload.password)
    return outcome_response(outcome)
