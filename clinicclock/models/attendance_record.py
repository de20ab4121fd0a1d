# ClinicClock - Attendance Record Model

import enum
from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, TYPE_CHECKING

from sqlalchemy import (
    String, DateTime, Date, Enum,
    Numeric, ForeignKey, Index
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDPrimaryKeyMixin, new_id

if TYPE_CHECKING:
    from .employee import Employee


HOURS_QUANTUM = Decimal("0.01")


class AttendanceStatus(str, enum.Enum):
    """Final status of an attendance record, stored by value."""
    
    COMPLETE = "complete"
    ABSENT = "absent"
    MISSING_CLOCK_OUT = "missing_clock_out"
    
    @property
    def label(self) -> str:
        """Human-readable label used in the exported report."""
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    AttendanceStatus.COMPLETE: "Complete",
    AttendanceStatus.ABSENT: "Absent",
    AttendanceStatus.MISSING_CLOCK_OUT: "Missing Clock-Out",
}


def compute_total_hours(clock_in: datetime, clock_out: datetime) -> Decimal:
    """
    Hours between two instants, rounded to 2 decimal places.
    
    Whole seconds only. A clock-out before the clock-in gives a
    negative value; it is not clamped.
    """
    seconds = int((clock_out - clock_in).total_seconds())
    hours = Decimal(seconds) / Decimal(3600)
    return hours.quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)


class AttendanceRecord(UUIDPrimaryKeyMixin, Base):
    """
    One shift for one employee on one calendar day.
    
    Created at clock-in with status MISSING_CLOCK_OUT and no clock-out
    time. Clock-out fills clock_out_time, total_hours and sets status
    to COMPLETE, exactly once.
    
    Invariant:
        status == COMPLETE  <=>  clock_out_time is not None
        total_hours is not None  <=>  status == COMPLETE
    """
    
    __tablename__ = "attendance_records"
    
    __table_args__ = (
        Index("ix_attendance_record_date", "record_date"),
        Index("ix_attendance_employee_date", "employee_id", "record_date"),
    )
    
    employee_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False
    )
    
    # Denormalized so reports don't need a join
    employee_name: Mapped[str] = mapped_column(
        String(150),
        nullable=False
    )
    
    record_date: Mapped[date] = mapped_column(
        Date,
        nullable=False
    )
    
    clock_in_time: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False
    )
    
    clock_out_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True
    )
    
    # Precision 5,2 allows -999.99 to 999.99 hours
    total_hours: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2),
        nullable=True
    )
    
    status: Mapped[AttendanceStatus] = mapped_column(
        Enum(
            AttendanceStatus,
            name="attendance_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=AttendanceStatus.MISSING_CLOCK_OUT,
        nullable=False
    )
    
    employee: Mapped["Employee"] = relationship(
        "Employee",
        back_populates="attendance_records"
    )
    
    def __repr__(self) -> str:
        out = self.clock_out_time.strftime('%H:%M') if self.clock_out_time else "--:--"
        return (
            f"<AttendanceRecord {self.employee_name} {self.record_date} "
            f"{self.clock_in_time.strftime('%H:%M')}-{out} {self.status.value}>"
        )
    
    @property
    def is_open(self) -> bool:
        """Clocked in but not yet clocked out."""
        return self.clock_out_time is None
    
    @classmethod
    def open_for(cls, employee: "Employee", clock_in_time: datetime) -> "AttendanceRecord":
        """
        Build a new, unsaved open record for a clock-in at clock_in_time.
        
        Only foreign key columns are set, never the relationship, so the
        record stays out of any session until a caller adds it.
        """
        return cls(
            id=new_id(),
            employee_id=employee.id,
            employee_name=employee.name,
            record_date=clock_in_time.date(),
            clock_in_time=clock_in_time,
            clock_out_time=None,
            total_hours=None,
            status=AttendanceStatus.MISSING_CLOCK_OUT,
        )
    
    def with_clock_out(self, clock_out_time: datetime) -> "AttendanceRecord":
        """
        Return an unsaved copy of this record completed at clock_out_time.
        
        The original instance is left untouched.
        """
        return AttendanceRecord(
            id=self.id,
            employee_id=self.employee_id,
            employee_name=self.employee_name,
            record_date=self.record_date,
            clock_in_time=self.clock_in_time,
            clock_out_time=clock_out_time,
            total_hours=compute_total_hours(self.clock_in_time, clock_out_time),
            status=AttendanceStatus.COMPLETE,
        )
