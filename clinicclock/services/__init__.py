# ClinicClock - Services
# Business logic layer

from .admin import AdminService
from .attendance import AttendanceService, EmployeeLocks
from .decisions import decide_admin_login, decide_clock_in, decide_clock_out
from .mailer import EmailReportDispatcher, ReportDispatcher
from .pending import PendingSetupStore
from .outcomes import (
    AdminLoginFailure,
    AdminLoginSuccess,
    ClockInAlreadyClockedIn,
    ClockInRequiresPasswordSetup,
    ClockInSuccess,
    ClockInWrongPassword,
    ClockOutAlreadyCompleted,
    ClockOutSuccess,
    ClockOutWrongPassword,
)
from .scheduler import ReportScheduler, create_report_scheduler
from .sessions import AdminSessionService
from .sync import InMemorySyncClient, NullSyncClient, SafeSync, SyncClient

__all__ = [
    "AdminService",
    "AttendanceService",
    "EmployeeLocks",
    "decide_admin_login",
    "decide_clock_in",
    "decide_clock_out",
    "EmailReportDispatcher",
    "ReportDispatcher",
    "AdminLoginFailure",
    "AdminLoginSuccess",
    "ClockInAlreadyClockedIn",
    "ClockInRequiresPasswordSetup",
    "ClockInSuccess",
    "ClockInWrongPassword",
    "ClockOutAlreadyCompleted",
    "ClockOutSuccess",
    "ClockOutWrongPassword",
    "PendingSetupStore",
    "ReportScheduler",
    "create_report_scheduler",
    "AdminSessionService",
    "InMemorySyncClient",
    "NullSyncClient",
    "SafeSync",
    "SyncClient",
]
