# ClinicClock - Admin Service
# Employee, holiday and report management for the admin panel

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from clinicclock.models.admin_user import AdminUser
from clinicclock.models.attendance_record import AttendanceRecord
from clinicclock.models.employee import Employee
from clinicclock.models.public_holiday import PublicHoliday
from clinicclock.services.passwords import hash_default_password, hash_password
from clinicclock.services.sync import SafeSync


logger = logging.getLogger(__name__)


class AdminService:
    """
    Admin panel operations.
    
    Mirrors AttendanceService: every change is committed locally first,
    then mirrored through SafeSync.
    
    Usage:
        admin = AdminService(db, sync)
        employee = admin.add_employee("Alice")
        admin.reset_employee_password(employee.id)
        admin.add_public_holiday(date(2025, 12, 25), "Christmas Day")
        records = admin.attendance_for_range(date(2025, 1, 1), date(2025, 1, 31))
    
    Raises ValueError for blank names, duplicate holidays and unknown ids.
    """
    
    def __init__(self, db: Session, sync: Optional[SafeSync] = None):
        self.db = db
        self.sync = sync or SafeSync()
    
    # Employees
    
    def list_employees(self) -> list[Employee]:
        return list(
            self.db.execute(select(Employee).order_by(Employee.name)).scalars().all()
        )
    
    def get_employee(self, employee_id: str) -> Employee:
        employee = self.db.get(Employee, employee_id)
        if employee is None:
            raise ValueError(f"Employee {employee_id} not found")
        return employee
    
    def add_employee(self, name: str) -> Employee:
        """Create an employee holding the default password."""
        name = (name or "").strip()
        if not name:
            raise ValueError("Employee name is required")
        
        employee = Employee.create(name=name, default_password_hash=hash_default_password())
        self.db.add(employee)
        self.db.commit()
        
        logger.info("Added employee %s", employee.name)
        self.sync.upsert_employee(employee)
        return employee
    
    def remove_employee(self, employee_id: str) -> None:
        """Delete an employee and, by cascade, all their attendance records."""
        employee = self.get_employee(employee_id)
        self.db.delete(employee)
        self.db.commit()
        
        logger.info("Removed employee %s", employee.name)
        self.sync.delete_employee(employee_id)
    
    def reset_employee_password(self, employee_id: str) -> Employee:
        """
        Put an employee back on the default password.
        
        They will have to choose a new one on their next clock-in.
        """
        employee = self.get_employee(employee_id)
        employee.password_hash = hash_default_password()
        employee.uses_default_password = True
        self.db.commit()
        
        logger.info("Reset password for %s", employee.name)
        self.sync.upsert_employee(employee)
        return employee
    
    # Public holidays
    
    def list_public_holidays(self) -> list[PublicHoliday]:
        return list(
            self.db.execute(
                select(PublicHoliday).order_by(PublicHoliday.holiday_date)
            ).scalars().all()
        )
    
    def is_public_holiday(self, day: date) -> bool:
        found = self.db.execute(
            select(PublicHoliday.id).where(PublicHoliday.holiday_date == day).limit(1)
        ).scalar_one_or_none()
        return found is not None
    
    def add_public_holiday(self, day: date, name: str) -> PublicHoliday:
        name = (name or "").strip()
        if not name:
            raise ValueError("Holiday name is required")
        if self.is_public_holiday(day):
            raise ValueError(f"{day.isoformat()} is already a public holiday")
        
        holiday = PublicHoliday(holiday_date=day, name=name)
        self.db.add(holiday)
        self.db.commit()
        
        logger.info("Added public holiday %s (%s)", holiday.name, day.isoformat())
        self.sync.upsert_public_holiday(holiday)
        return holiday
    
    def remove_public_holiday(self, holiday_id: str) -> None:
        holiday = self.db.get(PublicHoliday, holiday_id)
        if holiday is None:
            raise ValueError(f"Public holiday {holiday_id} not found")
        
        self.db.delete(holiday)
        self.db.commit()
        
        logger.info("Removed public holiday %s", holiday.name)
        self.sync.delete_public_holiday(holiday_id)
    
    # Reports
    
    def attendance_for_date(self, day: date) -> list[AttendanceRecord]:
        """All records for a calendar date, ordered by clock-in time."""
        return self.attendance_for_range(day, day)
    
    def attendance_for_range(self, start: date, end: date) -> list[AttendanceRecord]:
        """All records with start <= date <= end, by date then clock-in."""
        if start > end:
            raise ValueError("Start date must not be after end date")
        
        return list(
            self.db.execute(
                select(AttendanceRecord)
                .where(
                    AttendanceRecord.record_date >= start,
                    AttendanceRecord.record_date <= end,
                )
                .order_by(AttendanceRecord.record_date, AttendanceRecord.clock_in_time)
            ).scalars().all()
        )
    
    # Admin accounts
    
    def create_admin(self, username: str, password: str) -> AdminUser:
        """Create an admin account. Usernames must be unique (enforced by the database)."""
        username = (username or "").strip()
        if not username:
            raise ValueError("Username is required")
        
        admin = AdminUser(username=username, password_hash=hash_password(password))
        self.db.add(admin)
        self.db.commit()
        
        logger.info("Created admin account %s", username)
        return admin
    
    def set_admin_password(self, username: str, password: str) -> AdminUser:
        admin = self.db.execute(
            select(AdminUser).where(AdminUser.username == username)
        ).scalar_one_or_none()
        if admin is None:
            raise ValueError(f"Admin '{username}' not found")
        
        admin.password_hash = hash_password(password)
        self.db.commit()
        return admin
