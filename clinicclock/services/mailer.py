# ClinicClock - Report Email
# Sends the attendance CSV over SMTP (STARTTLS)

import logging
import smtplib
import ssl
from datetime import date
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

from clinicclock.config import Settings, get_settings
from clinicclock.services.report import (
    build_body,
    build_filename,
    build_subject,
    summarize,
)


logger = logging.getLogger(__name__)


class ReportDispatcher:
    """Interface for anything that can deliver a report."""
    
    def send(self, start: date, end: date, csv_payload: str) -> bool:
        raise NotImplementedError


class EmailReportDispatcher(ReportDispatcher):
    """
    Emails the attendance CSV to the configured recipients.
    
    Usage:
        dispatcher = EmailReportDispatcher()
        sent = dispatcher.send(date.today(), date.today(), csv_text)
    
    send() returns True on success and False on any failure, including
    missing SMTP configuration. It never raises.
    """
    
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
    
    def build_message(self, start: date, end: date, csv_payload: str) -> EmailMessage:
        s = self.settings
        subject = build_subject(s.clinic_name, start, end)
        
        msg = EmailMessage()
        msg["From"] = formataddr((s.sender_name, s.sender_email or s.smtp_user))
        msg["To"] = ", ".join(s.report_recipients)
        msg["Subject"] = subject
        msg.set_content(build_body(s.clinic_name, subject, summarize(csv_payload)))
        msg.add_attachment(
            csv_payload.encode("utf-8"),
            maintype="text",
            subtype="csv",
            filename=build_filename(start, end),
        )
        return msg
    
    def send(self, start: date, end: date, csv_payload: str) -> bool:
        s = self.settings
        
        if not s.email_configured:
            logger.warning("SMTP not configured; skipping report for %s", start.isoformat())
            return False
        
        msg = self.build_message(start, end, csv_payload)
        
        try:
            context = ssl.create_default_context()
            with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout) as server:
                server.starttls(context=context)
                server.login(s.smtp_user, s.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Report email %r failed: %s", msg["Subject"], e)
            return False
        
        logger.info("Report email %r sent to %s", msg["Subject"], msg["To"])
        return True
