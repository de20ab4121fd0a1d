# ClinicClock - Cloud Sync
# Best-effort mirroring of local writes to a replica document store

import logging
from typing import Optional

from clinicclock.models.attendance_record import AttendanceRecord
from clinicclock.models.employee import Employee
from clinicclock.models.public_holiday import PublicHoliday


logger = logging.getLogger(__name__)


def employee_document(employee: Employee) -> dict:
    """Replica document for an employee, keyed by its id."""
    return {
        "id": employee.id,
        "name": employee.name,
        "password_hash": employee.password_hash,
        "is_default_password": employee.uses_default_password,
        "created_at": employee.created_at.isoformat() if employee.created_at else None,
    }


def attendance_document(record: AttendanceRecord) -> dict:
    """Replica document for an attendance record, keyed by its id."""
    return {
        "id": record.id,
        "employee_id": record.employee_id,
        "employee_name": record.employee_name,
        "date": record.record_date.isoformat(),
        "clock_in_time": record.clock_in_time.isoformat(),
        "clock_out_time": record.clock_out_time.isoformat() if record.clock_out_time else None,
        "status": record.status.value,
        "total_hours": float(record.total_hours) if record.total_hours is not None else None,
    }


def holiday_document(holiday: PublicHoliday) -> dict:
    return {
        "id": holiday.id,
        "date": holiday.holiday_date.isoformat(),
        "name": holiday.name,
    }


class SyncClient:
    """
    Interface for the cloud replica.
    
    The local database is the system of record; the replica is a
    convenience copy. Implementations may raise on failure, SafeSync
    takes care of swallowing and logging.
    """
    
    def upsert_employee(self, employee: Employee) -> None:
        raise NotImplementedError
    
    def delete_employee(self, employee_id: str) -> None:
        raise NotImplementedError
    
    def upsert_attendance_record(self, record: AttendanceRecord) -> None:
        raise NotImplementedError
    
    def upsert_public_holiday(self, holiday: PublicHoliday) -> None:
        raise NotImplementedError
    
    def delete_public_holiday(self, holiday_id: str) -> None:
        raise NotImplementedError


class NullSyncClient(SyncClient):
    """Sync client used when no cloud replica is configured."""
    
    def upsert_employee(self, employee: Employee) -> None:
        pass
    
    def delete_employee(self, employee_id: str) -> None:
        pass
    
    def upsert_attendance_record(self, record: AttendanceRecord) -> None:
        pass
    
    def upsert_public_holiday(self, holiday: PublicHoliday) -> None:
        pass
    
    def delete_public_holiday(self, holiday_id: str) -> None:
        pass


class InMemorySyncClient(SyncClient):
    """
    Keeps replica documents in memory, grouped by collection.
    
    Handy for local development and tests when no cloud project is
    available.
    """
    
    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {
            "employees": {},
            "attendance_records": {},
            "public_holidays": {},
        }
    
    def upsert_employee(self, employee: Employee) -> None:
        self.collections["employees"][employee.id] = employee_document(employee)
    
    def delete_employee(self, employee_id: str) -> None:
        self.collections["employees"].pop(employee_id, None)
    
    def upsert_attendance_record(self, record: AttendanceRecord) -> None:
        self.collections["attendance_records"][record.id] = attendance_document(record)
    
    def upsert_public_holiday(self, holiday: PublicHoliday) -> None:
        self.collections["public_holidays"][holiday.id] = holiday_document(holiday)
    
    def delete_public_holiday(self, holiday_id: str) -> None:
        self.collections["public_holidays"].pop(holiday_id, None)


class SafeSync:
    """
    Fire-and-forget wrapper around a SyncClient.
    
    Every call is attempted once. Failures are logged and dropped;
    they never reach the caller, never roll back the local write and
    are never retried.
    
    Usage:
        sync = SafeSync(client)
        db.commit()
        sync.upsert_attendance_record(record)  # never raises
    """
    
    def __init__(self, client: Optional[SyncClient] = None):
        self.client = client or NullSyncClient()
    
    def _safe(self, label: str, func, *args) -> bool:
        try:
            func(*args)
            return True
        except Exception:
            logger.exception("Sync %s failed; local data is unaffected", label)
            return False
    
    def upsert_employee(self, employee: Employee) -> bool:
        return self._safe(f"upsert_employee({employee.id})", self.client.upsert_employee, employee)
    
    def delete_employee(self, employee_id: str) -> bool:
        return self._safe(f"delete_employee({employee_id})", self.client.delete_employee, employee_id)
    
    def upsert_attendance_record(self, record: AttendanceRecord) -> bool:
        return self._safe(
            f"upsert_attendance_record({record.id})",
            self.client.upsert_attendance_record,
            record,
        )
    
    def upsert_public_holiday(self, holiday: PublicHoliday) -> bool:
        return self._safe(
            f"upsert_public_holiday({holiday.id})",
            self.client.upsert_public_holiday,
            holiday,
        )
    
    def delete_public_holiday(self, holiday_id: str) -> bool:
        return self._safe(
            f"delete_public_holiday({holiday_id})",
            self.client.delete_public_holiday,
            holiday_id,
        )
