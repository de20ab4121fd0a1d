# ClinicClock - Admin Session Model
# Database-backed session storage for the admin panel

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDPrimaryKeyMixin, TimestampMixin

if TYPE_CHECKING:
    from .admin_user import AdminUser


class AdminSession(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Database-backed admin sessions.
    
    Kept in the database rather than a signed cookie so a logout
    really ends the session, even on a shared tablet.
    """
    
    __tablename__ = "admin_sessions"
    
    __table_args__ = (
        Index("ix_admin_sessions_admin_active", "admin_id", "is_active"),
    )
    
    admin_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("admin_users.id", ondelete="CASCADE"),
        nullable=False
    )
    
    # The session token (stored in cookie)
    session_token: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        index=True
    )
    
    expires_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False
    )
    
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False
    )
    
    logged_out_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True
    )
    
    admin: Mapped["AdminUser"] = relationship("AdminUser")
    
    def __repr__(self) -> str:
        status = "active" if self.is_active else "ended"
        return f"<AdminSession {self.admin_id} {status}>"
    
    @property
    def is_expired(self) -> bool:
        return datetime.now() > self.expires_at
