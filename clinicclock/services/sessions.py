# ClinicClock - Admin Sessions
# Session token management for the admin panel

from datetime import datetime, timedelta
from typing import Optional
import secrets

from sqlalchemy import select
from sqlalchemy.orm import Session

from clinicclock.config import get_settings
from clinicclock.models.admin_session import AdminSession
from clinicclock.models.admin_user import AdminUser


settings = get_settings()


class AdminSessionService:
    """
    Create, validate and end admin sessions.
    
    Usage:
        sessions = AdminSessionService(db)
        
        session = sessions.create(admin)
        admin = sessions.validate(session.session_token)
        sessions.end(session.session_token)
    
    Credential checks happen in AttendanceService.login_admin; this
    class only deals with tokens.
    """
    
    def __init__(self, db: Session):
        self.db = db
    
    def generate_session_token(self) -> str:
        """
        Generate a cryptographically secure session token.
        
        Returns a 64-character hex string (256 bits of entropy).
        """
        return secrets.token_hex(32)
    
    def create(self, admin: AdminUser) -> AdminSession:
        now = datetime.now()
        session = AdminSession(
            admin_id=admin.id,
            session_token=self.generate_session_token(),
            created_at=now,
            expires_at=now + timedelta(minutes=settings.session_expire_minutes),
            is_active=True,
        )
        self.db.add(session)
        self.db.commit()
        return session
    
    def validate(self, session_token: str) -> Optional[AdminUser]:
        """
        Return the admin behind session_token, or None.
        
        Expired sessions are deactivated on the way out.
        """
        session = self.db.execute(
            select(AdminSession)
            .where(AdminSession.session_token == session_token)
            .where(AdminSession.is_active == True)
        ).scalar_one_or_none()
        
        if not session:
            return None
        
        if session.is_expired:
            session.is_active = False
            self.db.commit()
            return None
        
        return self.db.get(AdminUser, session.admin_id)
    
    def end(self, session_token: str) -> bool:
        """
        Invalidate a session.
        
        Returns True if the session was found and invalidated.
        """
        session = self.db.execute(
            select(AdminSession).where(AdminSession.session_token == session_token)
        ).scalar_one_or_none()
        
        if not session:
            return False
        
        session.is_active = False
        session.logged_out_at = datetime.now()
        self.db.commit()
        return True
