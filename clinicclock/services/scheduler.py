# ClinicClock - Daily Report Scheduler
# Sends the attendance report once a day, one hour after the clinic closes

import logging
import threading
import uuid
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, Optional

from apscheduler.events import EVENT_JOB_MISSED, JobExecutionEvent
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

from clinicclock.config import get_settings
from clinicclock.models.attendance_record import AttendanceRecord
from clinicclock.services.mailer import ReportDispatcher
from clinicclock.services.report import generate_csv


logger = logging.getLogger(__name__)

JOB_PREFIX = "daily-attendance-report"

IDLE = "idle"
ARMED = "armed"


class ReportScheduler:
    """
    Arms a single one-shot job for the next report time and re-arms it
    every time it fires.
    
    Schedule (send hour, 24h clock; configurable in Settings):
    
        Mon-Thu   22:00
        Fri       20:00
        Sat-Sun   18:00
        Holiday   14:00   (overrides the weekday)
    
    States:
        idle   - no job outstanding (before start(), after stop())
        armed  - exactly one job outstanding
    
    The next fire time is always recomputed from the current instant, so
    a restart after downtime simply picks up the next eligible slot.
    A failed delivery is logged and not retried; the next day's report
    is the retry.
    
    Usage:
        scheduler = ReportScheduler(
            is_holiday=lambda day: ...,
            fetch_records=lambda day: ...,
            dispatcher=EmailReportDispatcher(),
        )
        scheduler.start()
        ...
        scheduler.shutdown()
    """
    
    def __init__(
        self,
        is_holiday: Callable[[date], bool],
        fetch_records: Callable[[date], Iterable[AttendanceRecord]],
        dispatcher: ReportDispatcher,
        scheduler: Optional[BackgroundScheduler] = None,
        clock: Callable[[], datetime] = datetime.now,
        send_hours: Optional[dict[int, int]] = None,
        holiday_hour: Optional[int] = None,
        misfire_grace_seconds: Optional[int] = None,
    ):
        settings = get_settings()
        
        self.is_holiday = is_holiday
        self.fetch_records = fetch_records
        self.dispatcher = dispatcher
        self.scheduler = scheduler or BackgroundScheduler()
        self.clock = clock
        self.send_hours = send_hours or settings.report_send_hours
        self.holiday_hour = (
            holiday_hour if holiday_hour is not None else settings.report_hour_holiday
        )
        self.misfire_grace_seconds = (
            misfire_grace_seconds
            if misfire_grace_seconds is not None
            else settings.report_misfire_grace_seconds
        )
        
        self._lock = threading.Lock()
        self._active = False
        self._job = None
        self._next_run: Optional[datetime] = None
        self._listening = False
    
    # Calendar
    
    def send_time_for(self, day: date) -> datetime:
        """The report send time on day (holiday hour if day is a holiday)."""
        try:
            holiday = self.is_holiday(day)
        except Exception:
            logger.exception("Holiday lookup for %s failed; using weekday hours", day)
            holiday = False
        
        hour = self.holiday_hour if holiday else self.send_hours[day.weekday()]
        return datetime.combine(day, time(hour=hour))
    
    def next_fire_time(self, now: datetime) -> datetime:
        """
        The first send time strictly after now.
        
        Today's slot if it is still ahead, otherwise the following day's.
        """
        day = now.date()
        while True:
            send_time = self.send_time_for(day)
            if send_time > now:
                return send_time
            day += timedelta(days=1)
    
    # Lifecycle
    
    @property
    def state(self) -> str:
        return ARMED if self._job is not None else IDLE
    
    @property
    def next_run(self) -> Optional[datetime]:
        """When the outstanding job fires, or None when idle."""
        return self._next_run if self._job is not None else None
    
    def start(self) -> datetime:
        """
        Arm the job for the next send time.
        
        Calling start() again replaces the outstanding job, so it is
        safe to call more than once.
        """
        with self._lock:
            self._active = True
        
        if not self._listening:
            self.scheduler.add_listener(self._on_missed, EVENT_JOB_MISSED)
            self._listening = True
        
        if not self.scheduler.running:
            self.scheduler.start()
        
        logger.info("Report scheduler started")
        return self._arm()
    
    def stop(self) -> None:
        """
        Cancel the outstanding job. Safe to call when already idle.
        
        A dispatch already in progress is left to finish but will not
        re-arm.
        """
        with self._lock:
            self._active = False
            self._cancel_job()
        logger.info("Report scheduler stopped")
    
    def shutdown(self) -> None:
        """Stop and shut down the background scheduler thread."""
        self.stop()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
    
    def fire(self, report_day: Optional[date] = None) -> bool:
        """
        Send the report for report_day, then re-arm for the next send time.
        
        The armed job passes the day it was scheduled for, so a run
        delayed past midnight still reports the right day. Called without
        one it reports today.
        
        Returns whether the report was delivered. Failures never
        propagate; they would stop the daily cadence.
        """
        today = report_day or self.clock().date()
        logger.info("Sending daily attendance report for %s", today.isoformat())
        
        sent = False
        try:
            records = list(self.fetch_records(today))
            payload = generate_csv(records)
            sent = self.dispatcher.send(today, today, payload)
            if not sent:
                logger.warning("Daily report for %s was not delivered; next attempt tomorrow", today)
        except Exception:
            logger.exception("Daily report for %s failed; next attempt tomorrow", today)
        
        self._arm()
        return sent
    
    # Internals
    
    def _arm(self) -> Optional[datetime]:
        now = self.clock()
        fire_at = self.next_fire_time(now)
        
        with self._lock:
            if not self._active:
                return None
            
            self._cancel_job()
            self._job = self.scheduler.add_job(
                self.fire,
                args=[fire_at.date()],
                trigger="date",
                run_date=fire_at,
                id=f"{JOB_PREFIX}-{uuid.uuid4().hex}",
                name="Daily attendance report",
                max_instances=1,
                coalesce=True,
                misfire_grace_time=self.misfire_grace_seconds,
            )
            self._next_run = fire_at
        
        logger.info(
            "Next report scheduled for %s (in %d min)",
            fire_at.isoformat(timespec="minutes"),
            int((fire_at - now).total_seconds() // 60),
        )
        return fire_at
    
    def _cancel_job(self) -> None:
        # Caller holds self._lock
        if self._job is None:
            return
        try:
            self._job.remove()
        except JobLookupError:
            # Already ran and was dropped by the scheduler
            pass
        self._job = None
        self._next_run = None
    
    def _on_missed(self, event: JobExecutionEvent) -> None:
        """Re-arm when a run was skipped (e.g. the host was asleep)."""
        if not event.job_id.startswith(JOB_PREFIX):
            return
        logger.warning("Report run scheduled for %s was missed", event.scheduled_run_time)
        self._arm()


def create_report_scheduler(
    dispatcher: Optional[ReportDispatcher] = None,
    scheduler: Optional[BackgroundScheduler] = None,
) -> ReportScheduler:
    """
    Build a ReportScheduler wired to the application database.
    
    Each lookup opens its own short-lived session since it runs on the
    scheduler's thread.
    """
    from clinicclock.database import get_db_context
    from clinicclock.services.admin import AdminService
    from clinicclock.services.mailer import EmailReportDispatcher
    
    def is_holiday(day: date) -> bool:
        with get_db_context() as db:
            return AdminService(db).is_public_holiday(day)
    
    def fetch_records(day: date) -> list[AttendanceRecord]:
        with get_db_context() as db:
            return AdminService(db).attendance_for_date(day)
    
    return ReportScheduler(
        is_holiday=is_holiday,
        fetch_records=fetch_records,
        dispatcher=dispatcher or EmailReportDispatcher(),
        scheduler=scheduler,
    )
