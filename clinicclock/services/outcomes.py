# ClinicClock - Authentication Outcomes
# Closed result types returned by the clock-in/out and admin login decisions

from dataclasses import dataclass
from typing import Union

from clinicclock.models.admin_user import AdminUser
from clinicclock.models.attendance_record import AttendanceRecord
from clinicclock.models.employee import Employee


# Clock-in

@dataclass(frozen=True)
class ClockInSuccess:
    """Password verified; record is the new open attendance record."""
    record: AttendanceRecord
    tag = "success"


@dataclass(frozen=True)
class ClockInRequiresPasswordSetup:
    """
    Password verified but the employee still holds the default password.
    
    pending_record is NOT persisted. The caller must collect a new
    password and pass both back to
    AttendanceService.complete_setup_and_clock_in.
    """
    employee: Employee
    pending_record: AttendanceRecord
    tag = "requires_password_setup"


@dataclass(frozen=True)
class ClockInWrongPassword:
    tag = "wrong_password"


@dataclass(frozen=True)
class ClockInAlreadyClockedIn:
    """The employee has an open record today; existing is that record."""
    existing: AttendanceRecord
    tag = "already_clocked_in"


ClockInOutcome = Union[
    ClockInSuccess,
    ClockInRequiresPasswordSetup,
    ClockInWrongPassword,
    ClockInAlreadyClockedIn,
]


# Clock-out

@dataclass(frozen=True)
class ClockOutSuccess:
    """record carries the clock-out time, total hours and COMPLETE status."""
    record: AttendanceRecord
    tag = "success"


@dataclass(frozen=True)
class ClockOutWrongPassword:
    tag = "wrong_password"


@dataclass(frozen=True)
class ClockOutAlreadyCompleted:
    tag = "already_completed"


ClockOutOutcome = Union[
    ClockOutSuccess,
    ClockOutWrongPassword,
    ClockOutAlreadyCompleted,
]


# Admin login

@dataclass(frozen=True)
class AdminLoginSuccess:
    admin: AdminUser
    tag = "success"


@dataclass(frozen=True)
class AdminLoginFailure:
    """Unknown username or wrong password. Deliberately carries no detail."""
    tag = "failure"


AdminLoginOutcome = Union[AdminLoginSuccess, AdminLoginFailure]
