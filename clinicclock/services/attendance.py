# ClinicClock - Attendance Service
# Clock-in/out against the database, with two-phase first-time password setup

import logging
import threading
from datetime import date, datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from clinicclock.models.admin_user import AdminUser
from clinicclock.models.attendance_record import AttendanceRecord
from clinicclock.models.employee import Employee
from clinicclock.services.decisions import (
    decide_admin_login,
    decide_clock_in,
    decide_clock_out,
)
from clinicclock.services.outcomes import (
    AdminLoginOutcome,
    ClockInAlreadyClockedIn,
    ClockInOutcome,
    ClockInSuccess,
    ClockInWrongPassword,
    ClockOutOutcome,
    ClockOutSuccess,
    ClockOutWrongPassword,
)
from clinicclock.services.passwords import (
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
    hash_password,
    is_valid_length,
)
from clinicclock.services.sync import SafeSync


logger = logging.getLogger(__name__)


class EmployeeLocks:
    """
    One lock per employee id, created on first use.
    
    Holding an employee's lock across load-decide-write keeps two
    near-simultaneous requests for the same person from both getting
    past the already-clocked-in check. Different employees never wait
    on each other. Only guards a single process.
    """
    
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
    
    def __call__(self, employee_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(employee_id)
            if lock is None:
                lock = self._locks[employee_id] = threading.Lock()
            return lock


employee_locks = EmployeeLocks()


class AttendanceService:
    """
    Runs the clock-in/out decisions against the database.
    
    Usage:
        service = AttendanceService(db, sync)
        
        outcome = service.clock_in(employee_id, "secret7")
        if isinstance(outcome, ClockInRequiresPasswordSetup):
            # collect a new password, then
            outcome = service.complete_setup_and_clock_in(
                outcome.employee, outcome.pending_record, "mySecret9"
            )
        
        outcome = service.clock_out(employee_id, "mySecret9")
    
    Only two things are ever written: a successful clock-in/out record,
    and the password setup pair. Every other path is read-only. Sync
    mirroring happens after the local commit and never fails the call.
    """
    
    def __init__(
        self,
        db: Session,
        sync: Optional[SafeSync] = None,
        locks: Optional[EmployeeLocks] = None,
    ):
        self.db = db
        self.sync = sync or SafeSync()
        self.locks = locks or employee_locks
    
    def todays_record(self, employee_id: str, day: date) -> Optional[AttendanceRecord]:
        """
        The record the clock-in/out guards look at for employee_id on day.
        
        If the employee worked more than one shift that day, an open
        record wins; otherwise the latest clock-in.
        """
        return self.db.execute(
            select(AttendanceRecord)
            .where(AttendanceRecord.employee_id == employee_id)
            .where(AttendanceRecord.record_date == day)
            .order_by(
                AttendanceRecord.clock_out_time.is_(None).desc(),
                AttendanceRecord.clock_in_time.desc(),
            )
            .limit(1)
        ).scalars().first()
    
    def clock_in(
        self,
        employee_id: str,
        password: str,
        now: Optional[datetime] = None,
    ) -> ClockInOutcome:
        """
        Attempt a clock-in.
        
        An unknown employee id is reported as ClockInWrongPassword.
        Only ClockInSuccess writes anything; ClockInRequiresPasswordSetup
        leaves the database untouched until complete_setup_and_clock_in.
        """
        now = now or datetime.now()
        
        with self.locks(employee_id):
            employee = self.db.get(Employee, employee_id)
            if employee is None:
                return ClockInWrongPassword()
            
            existing = self.todays_record(employee_id, now.date())
            outcome = decide_clock_in(employee, password, existing, now)
            
            if isinstance(outcome, ClockInSuccess):
                self.db.add(outcome.record)
                self.db.commit()
                logger.info("%s clocked in at %s", employee.name, now.isoformat(timespec="minutes"))
                self.sync.upsert_attendance_record(outcome.record)
            
            return outcome
    
    def complete_setup_and_clock_in(
        self,
        employee: Employee,
        pending_record: AttendanceRecord,
        new_password: str,
    ) -> ClockInOutcome:
        """
        Second phase of a first-time clock-in.
        
        Saves the new password (clearing uses_default_password) and the
        pending clock-in in one transaction, then mirrors both.
        
        The pending record id doubles as an idempotency key: submitting
        the same pending record twice returns the stored record without
        writing again.
        
        Any other proposal is checked against the current state first,
        since the employee may have finished a different setup (another
        tap, another tab) after this one was proposed:
        
            open record today     -> ClockInAlreadyClockedIn, nothing written
            personal password set -> ValueError, nothing written
            shift ended after it  -> ValueError, nothing written
        
        Raises:
            ValueError: If new_password is outside the allowed length, the
                employee no longer exists, or the proposal is stale. The
                presenting layer is expected to have validated the
                password already.
        """
        if not is_valid_length(new_password):
            raise ValueError(
                f"New password must be {MIN_PASSWORD_LENGTH}-{MAX_PASSWORD_LENGTH} characters"
            )
        
        with self.locks(employee.id):
            already_saved = self.db.get(AttendanceRecord, pending_record.id)
            if already_saved is not None:
                return ClockInSuccess(already_saved)
            
            current = self.db.get(Employee, employee.id, populate_existing=True)
            if current is None:
                raise ValueError(f"Employee {employee.id} not found")
            
            existing = self.todays_record(current.id, pending_record.record_date)
            if existing is not None and existing.is_open:
                logger.info("%s is already clocked in; dropping password setup", current.name)
                return ClockInAlreadyClockedIn(existing)
            
            if not current.uses_default_password:
                raise ValueError(
                    f"{current.name} already has a personal password, please clock in again"
                )
            
            if existing is not None and existing.clock_out_time >= pending_record.clock_in_time:
                raise ValueError(
                    f"{current.name} already worked a shift after this clock-in, please clock in again"
                )
            
            try:
                # Credential first, so a failure between the two writes
                # can only leave "password changed, shift not recorded"
                current.password_hash = hash_password(new_password)
                current.uses_default_password = False
                self.db.flush()
                
                self.db.add(pending_record)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
            
            logger.info(
                "%s set a personal password and clocked in at %s",
                current.name,
                pending_record.clock_in_time.isoformat(timespec="minutes"),
            )
            self.sync.upsert_employee(current)
            self.sync.upsert_attendance_record(pending_record)
            
            return ClockInSuccess(pending_record)
    
    def clock_out(
        self,
        employee_id: str,
        password: str,
        now: Optional[datetime] = None,
    ) -> ClockOutOutcome:
        """
        Attempt a clock-out against today's record.
        
        An unknown employee, or one with no record today, is reported as
        ClockOutWrongPassword. The kiosk should never offer clock-out in
        that case.
        """
        now = now or datetime.now()
        
        with self.locks(employee_id):
            employee = self.db.get(Employee, employee_id)
            if employee is None:
                return ClockOutWrongPassword()
            
            record = self.todays_record(employee_id, now.date())
            if record is None:
                return ClockOutWrongPassword()
            
            outcome = decide_clock_out(employee, record, password, now)
            
            if isinstance(outcome, ClockOutSuccess):
                saved = self.db.merge(outcome.record)
                self.db.commit()
                logger.info(
                    "%s clocked out at %s (%s h)",
                    employee.name,
                    now.isoformat(timespec="minutes"),
                    saved.total_hours,
                )
                self.sync.upsert_attendance_record(saved)
                return ClockOutSuccess(saved)
            
            return outcome
    
    def login_admin(self, username: str, password: str) -> AdminLoginOutcome:
        """Check admin credentials. Read-only."""
        admin = self.db.execute(
            select(AdminUser).where(AdminUser.username == username)
        ).scalar_one_or_none()
        
        return decide_admin_login(admin, password)
