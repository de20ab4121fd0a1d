# ClinicClock - Admin User Model

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDPrimaryKeyMixin


class AdminUser(UUIDPrimaryKeyMixin, Base):
    """
    Administrator account for the admin panel.
    
    The clinic runs with two of these. Username uniqueness is enforced
    by the database, not by the services.
    """
    
    __tablename__ = "admin_users"
    
    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True
    )
    
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )
    
    def __repr__(self) -> str:
        return f"<AdminUser {self.username}>"
