# ClinicClock - API Schemas
# Request and response bodies for the kiosk and admin routes

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from clinicclock.models.attendance_record import AttendanceStatus


class ClockRequest(BaseModel):
    employee_id: str
    password: str


class PasswordSetupRequest(BaseModel):
    setup_token: str
    new_password: str


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class EmployeeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)


class HolidayCreate(BaseModel):
    holiday_date: date
    name: str = Field(min_length=1, max_length=150)


class ReportSendRequest(BaseModel):
    start: date
    end: date


class AttendanceRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    
    id: str
    employee_id: str
    employee_name: str
    record_date: date
    clock_in_time: datetime
    clock_out_time: Optional[datetime] = None
    total_hours: Optional[Decimal] = None
    status: AttendanceStatus


class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    
    id: str
    name: str
    uses_default_password: bool
    created_at: datetime


class KioskEmployeeOut(BaseModel):
    id: str
    name: str
    clocked_in: bool


class HolidayOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    
    id: str
    holiday_date: date
    name: str


class ClockOutcomeOut(BaseModel):
    """Tagged outcome returned by the kiosk clock-in/out routes."""
    outcome: str
    record: Optional[AttendanceRecordOut] = None
    setup_token: Optional[str] = None
    employee_name: Optional[str] = None


class ScheduleOut(BaseModel):
    state: str
    next_run: Optional[datetime] = None
