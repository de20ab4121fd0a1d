# ClinicClock - SQLAlchemy Models

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, new_id
from .employee import Employee
from .attendance_record import AttendanceRecord, AttendanceStatus, compute_total_hours
from .admin_user import AdminUser
from .admin_session import AdminSession
from .public_holiday import PublicHoliday

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "new_id",
    "Employee",
    "AttendanceRecord",
    "AttendanceStatus",
    "compute_total_hours",
    "AdminUser",
    "AdminSession",
    "PublicHoliday",
]
