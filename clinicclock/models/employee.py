# ClinicClock - Employee Model

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDPrimaryKeyMixin, TimestampMixin, new_id

if TYPE_CHECKING:
    from .attendance_record import AttendanceRecord


class Employee(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    A clinic employee who clocks in and out at the kiosk.
    
    Credentials:
        Every new employee starts with the shared default password and
        uses_default_password=True. The first successful clock-in forces
        them to pick a personal password before the shift is recorded.
        An admin reset puts them back into that state.
    
    Deleting an employee removes all of their attendance records.
    """
    
    __tablename__ = "employees"
    
    __table_args__ = (
        Index("ix_employees_name", "name"),
    )
    
    name: Mapped[str] = mapped_column(
        String(150),
        nullable=False
    )
    
    # bcrypt hash - never plain text
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )
    
    uses_default_password: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False
    )
    
    attendance_records: Mapped[list["AttendanceRecord"]] = relationship(
        "AttendanceRecord",
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    
    def __repr__(self) -> str:
        flag = " [DEFAULT PASSWORD]" if self.uses_default_password else ""
        return f"<Employee {self.name}{flag}>"
    
    @classmethod
    def create(cls, name: str, default_password_hash: str) -> "Employee":
        """
        Build a brand-new employee holding the default credential.
        
        Args:
            name: Display name shown on the kiosk
            default_password_hash: Hash of the system default password
        """
        return cls(
            id=new_id(),
            name=name,
            password_hash=default_password_hash,
            uses_default_password=True,
            created_at=datetime.now(),
        )
