# ClinicClock - Public Holiday Model

from datetime import date

from sqlalchemy import String, Date
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDPrimaryKeyMixin


class PublicHoliday(UUIDPrimaryKeyMixin, Base):
    """
    A public holiday. The clinic closes early, so the daily report goes
    out at the holiday send hour instead of the weekday one.
    """
    
    __tablename__ = "public_holidays"
    
    holiday_date: Mapped[date] = mapped_column(
        Date,
        unique=True,
        nullable=False,
        index=True
    )
    
    name: Mapped[str] = mapped_column(
        String(150),
        nullable=False
    )
    
    def __repr__(self) -> str:
        return f"<PublicHoliday {self.holiday_date} {self.name}>"
