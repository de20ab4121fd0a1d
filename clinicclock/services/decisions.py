# ClinicClock - Attendance Decisions
# Pure functions deciding clock-in, clock-out and admin login outcomes.
# No database access and no clock reads: callers pass everything in.

from datetime import datetime
from typing import Optional

from clinicclock.models.admin_user import AdminUser
from clinicclock.models.attendance_record import AttendanceRecord
from clinicclock.models.employee import Employee
from clinicclock.services.outcomes import (
    AdminLoginFailure,
    AdminLoginOutcome,
    AdminLoginSuccess,
    ClockInAlreadyClockedIn,
    ClockInOutcome,
    ClockInRequiresPasswordSetup,
    ClockInSuccess,
    ClockInWrongPassword,
    ClockOutAlreadyCompleted,
    ClockOutOutcome,
    ClockOutSuccess,
    ClockOutWrongPassword,
)
from clinicclock.services.passwords import verify_password


def decide_clock_in(
    employee: Employee,
    password: str,
    existing_record: Optional[AttendanceRecord],
    now: datetime,
) -> ClockInOutcome:
    """
    Decide the outcome of a clock-in attempt.
    
    Priority order:
        1. Open record already exists today  -> ClockInAlreadyClockedIn
        2. Wrong password                    -> ClockInWrongPassword
        3. Still on the default password     -> ClockInRequiresPasswordSetup
        4. Otherwise                         -> ClockInSuccess
    
    The already-clocked-in guard runs before the password check, so a
    blocked attempt reveals nothing about whether the password was right.
    
    The record in ClockInSuccess / ClockInRequiresPasswordSetup is new
    and unsaved; persisting it is the caller's job.
    """
    if existing_record is not None and existing_record.clock_out_time is None:
        return ClockInAlreadyClockedIn(existing_record)
    
    if not verify_password(password, employee.password_hash):
        return ClockInWrongPassword()
    
    pending = AttendanceRecord.open_for(employee, now)
    
    # First-time login: nothing is saved until a personal password is set
    if employee.uses_default_password:
        return ClockInRequiresPasswordSetup(employee=employee, pending_record=pending)
    
    return ClockInSuccess(pending)


def decide_clock_out(
    employee: Employee,
    record: AttendanceRecord,
    password: str,
    now: datetime,
) -> ClockOutOutcome:
    """
    Decide the outcome of a clock-out attempt against record.
    
    Priority order:
        1. Record already clocked out  -> ClockOutAlreadyCompleted
        2. Wrong password              -> ClockOutWrongPassword
        3. Otherwise                   -> ClockOutSuccess with an unsaved
                                          completed copy of record
    
    If now is earlier than the clock-in time the total hours come out
    negative and are returned as-is.
    """
    if record.clock_out_time is not None:
        return ClockOutAlreadyCompleted()
    
    if not verify_password(password, employee.password_hash):
        return ClockOutWrongPassword()
    
    return ClockOutSuccess(record.with_clock_out(now))


def decide_admin_login(admin: Optional[AdminUser], password: str) -> AdminLoginOutcome:
    """
    Decide the outcome of an admin login.
    
    An unknown username and a wrong password produce the same
    AdminLoginFailure value so the response can't be used to probe
    for usernames.
    """
    if admin is None:
        return AdminLoginFailure()
    
    if not verify_password(password, admin.password_hash):
        return AdminLoginFailure()
    
    return AdminLoginSuccess(admin)
