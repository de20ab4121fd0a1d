# ClinicClock - Configuration
# Application settings loaded from environment variables

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    
    Create a .env file in the project root for local development:
    
        # .env
        CLINICCLOCK_DATABASE_URL=sqlite:///./clinicclock.db
        CLINICCLOCK_SMTP_HOST=smtp.gmail.com
        CLINICCLOCK_SMTP_USER=attendance@example.com
        CLINICCLOCK_SMTP_PASSWORD=app-password-here
        CLINICCLOCK_REPORT_RECIPIENTS=["manager@example.com"]
    
    For production, set these as actual environment variables.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="CLINICCLOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    
    # Application
    app_name: str = "ClinicClock"
    clinic_name: str = "Wellness on Wellington"
    debug: bool = False
    
    # Database - SQLite file by default, any SQLAlchemy URL works
    database_url: str = "sqlite:///./clinicclock.db"
    
    # Connection pool settings (ignored for SQLite)
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800  # Recycle connections after 30 min
    
    # Password hashing cost (bcrypt log rounds)
    bcrypt_rounds: int = 12
    
    # Admin session settings
    session_expire_minutes: int = 60
    
    # How long a clock-in waiting on first-time password setup stays valid
    pending_setup_ttl_seconds: int = 300
    
    # Create missing tables at startup (SQLite kiosk installs)
    create_tables_on_startup: bool = True
    
    # Daily report schedule (24h clock, one hour after closing)
    report_scheduler_enabled: bool = True
    report_hour_monday_to_thursday: int = 22
    report_hour_friday: int = 20
    report_hour_weekend: int = 18
    report_hour_holiday: int = 14
    report_misfire_grace_seconds: int = 3600
    
    # SMTP (STARTTLS) for the daily report
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_timeout: int = 30
    sender_email: Optional[str] = None
    sender_name: str = "Wellness on Wellington"
    report_recipients: list[str] = []
    
    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")
    
    @property
    def email_configured(self) -> bool:
        """True when SMTP credentials and at least one recipient are set."""
        return bool(
            self.smtp_host
            and self.smtp_user
            and self.smtp_password
            and self.report_recipients
        )
    
    @property
    def report_send_hours(self) -> dict[int, int]:
        """
        Weekday (Monday == 0 ... Sunday == 6) to report send hour.
        """
        weekday = self.report_hour_monday_to_thursday
        weekend = self.report_hour_weekend
        return {
            0: weekday,
            1: weekday,
            2: weekday,
            3: weekday,
            4: self.report_hour_friday,
            5: weekend,
            6: weekend,
        }


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    
    Using lru_cache ensures we only load settings once.
    """
    return Settings()
