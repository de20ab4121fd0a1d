from datetime import date, datetime

import pytest
from apscheduler.events import EVENT_JOB_MISSED, JobExecutionEvent
from apscheduler.jobstores.base import JobLookupError

from clinicclock.models import AttendanceRecord, Employee
from clinicclock.services.mailer import ReportDispatcher
from clinicclock.services.scheduler import ARMED, IDLE, JOB_PREFIX, ReportScheduler


SEND_HOURS = {0: 22, 1: 22, 2: 22, 3: 22, 4: 20, 5: 18, 6: 18}

WEDNESDAY = date(2025, 3, 12)
FRIDAY = date(2025, 3, 14)
SATURDAY = date(2025, 3, 15)


class FakeJob:
    def __init__(self, scheduler, job_id, run_date, func, args):
        self.scheduler = scheduler
        self.id = job_id
        self.run_date = run_date
        self.func = func
        self.args = args

    def remove(self):
        if self.id not in self.scheduler.jobs:
            raise JobLookupError(self.id)
        del self.scheduler.jobs[self.id]


class FakeScheduler:
    """Stands in for BackgroundScheduler; jobs never run on their own."""

    def __init__(self):
        self.running = False
        self.jobs = {}
        self.listeners = []

    def start(self):
        self.running = True

    def shutdown(self, wait=True):
        self.running = False

    def add_listener(self, callback, mask):
        self.listeners.append((callback, mask))

    def add_job(self, func, trigger, run_date, id, args=(), **kwargs):
        assert trigger == "date"
        job = FakeJob(self, id, run_date, func, list(args))
        self.jobs[id] = job
        return job

    def consume(self, job):
        """Mimic the scheduler dropping a one-shot job once it has run."""
        self.jobs.pop(job.id, None)


class FakeDispatcher(ReportDispatcher):
    def __init__(self, result=True, error=None):
        self.result = result
        self.error = error
        self.sent = []

    def send(self, start, end, csv_payload):
        self.sent.append((start, end, csv_payload))
        if self.error:
            raise self.error
        return self.result


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def make_scheduler(now, holidays=(), dispatcher=None, records=None, clock=None):
    return ReportScheduler(
        is_holiday=lambda day: day in set(holidays),
        fetch_records=lambda day: records or [],
        dispatcher=dispatcher or FakeDispatcher(),
        scheduler=FakeScheduler(),
        clock=clock or Clock(now),
        send_hours=SEND_HOURS,
        holiday_hour=14,
        misfire_grace_seconds=60,
    )


class TestNextFireTime:
    def test_weekday_morning_fires_same_evening(self):
        s = make_scheduler(None)
        assert s.next_fire_time(datetime(2025, 3, 12, 10, 0)) == datetime(2025, 3, 12, 22, 0)

    def test_weekday_late_fires_next_day(self):
        s = make_scheduler(None)
        assert s.next_fire_time(datetime(2025, 3, 12, 23, 0)) == datetime(2025, 3, 13, 22, 0)

    def test_exactly_at_send_time_moves_on(self):
        s = make_scheduler(None)
        assert s.next_fire_time(datetime(2025, 3, 12, 22, 0)) == datetime(2025, 3, 13, 22, 0)

    def test_holiday_uses_holiday_hour(self):
        s = make_scheduler(None, holidays=[SATURDAY])
        assert s.next_fire_time(datetime(2025, 3, 15, 10, 0)) == datetime(2025, 3, 15, 14, 0)

    def test_holiday_after_its_send_time_rolls_to_next_day(self):
        s = make_scheduler(None, holidays=[WEDNESDAY])
        assert s.next_fire_time(datetime(2025, 3, 12, 15, 0)) == datetime(2025, 3, 13, 22, 0)

    @pytest.mark.parametrize(
        "day, hour",
        [
            (date(2025, 3, 10), 22),  # Monday
            (date(2025, 3, 13), 22),  # Thursday
            (FRIDAY, 20),
            (SATURDAY, 18),
            (date(2025, 3, 16), 18),  # Sunday
        ],
    )
    def test_weekday_calendar(self, day, hour):
        s = make_scheduler(None)
        assert s.send_time_for(day) == datetime.combine(day, datetime.min.time()).replace(hour=hour)

    def test_friday_after_close_goes_to_saturday(self):
        s = make_scheduler(None)
        assert s.next_fire_time(datetime(2025, 3, 14, 21, 0)) == datetime(2025, 3, 15, 18, 0)

    def test_failed_holiday_lookup_falls_back_to_weekday(self):
        def broken(day):
            raise RuntimeError("db locked")

        s = ReportScheduler(broken, lambda day: [], FakeDispatcher(), scheduler=FakeScheduler(),
                            send_hours=SEND_HOURS, holiday_hour=14)
        assert s.send_time_for(WEDNESDAY) == datetime(2025, 3, 12, 22, 0)


class TestLifecycle:
    def test_starts_idle(self):
        s = make_scheduler(datetime(2025, 3, 12, 10, 0))
        assert s.state == IDLE
        assert s.next_run is None

    def test_start_arms_one_job(self):
        s = make_scheduler(datetime(2025, 3, 12, 10, 0))

        fire_at = s.start()

        assert fire_at == datetime(2025, 3, 12, 22, 0)
        assert s.state == ARMED
        assert s.next_run == fire_at
        assert s.scheduler.running
        assert len(s.scheduler.jobs) == 1

    def test_restart_replaces_the_job(self):
        s = make_scheduler(datetime(2025, 3, 12, 10, 0))
        s.start()
        first_ids = set(s.scheduler.jobs)

        s.start()

        assert len(s.scheduler.jobs) == 1
        assert set(s.scheduler.jobs) != first_ids
        assert len(s.scheduler.listeners) == 1

    def test_stop_cancels(self):
        s = make_scheduler(datetime(2025, 3, 12, 10, 0))
        s.start()

        s.stop()

        assert s.state == IDLE
        assert s.scheduler.jobs == {}

    def test_stop_when_idle_is_harmless(self):
        s = make_scheduler(datetime(2025, 3, 12, 10, 0))
        s.stop()
        s.stop()
        assert s.state == IDLE

    def test_shutdown_stops_background_thread(self):
        s = make_scheduler(datetime(2025, 3, 12, 10, 0))
        s.start()

        s.shutdown()

        assert not s.scheduler.running
        assert s.state == IDLE


class TestFire:
    def fire_at_send_time(self, s, when):
        job = next(iter(s.scheduler.jobs.values()))
        s.scheduler.consume(job)
        s.clock.now = when
        return job.func(*job.args)

    def test_sends_todays_report_and_rearms(self):
        alice = Employee(id="e1", name="Alice", password_hash="x", uses_default_password=False)
        record = AttendanceRecord.open_for(alice, datetime(2025, 3, 12, 9, 0))
        dispatcher = FakeDispatcher()
        s = make_scheduler(datetime(2025, 3, 12, 10, 0), dispatcher=dispatcher, records=[record])
        s.start()

        sent = self.fire_at_send_time(s, datetime(2025, 3, 12, 22, 0, 1))

        assert sent is True
        start, end, payload = dispatcher.sent[0]
        assert start == end == WEDNESDAY
        assert payload.splitlines()[1].startswith("Alice,2025-03-12,9:00 AM,")
        assert s.next_run == datetime(2025, 3, 13, 22, 0)
        assert len(s.scheduler.jobs) == 1

    def test_job_carries_its_scheduled_day(self):
        s = make_scheduler(datetime(2025, 3, 12, 10, 0))
        s.start()

        job = next(iter(s.scheduler.jobs.values()))

        assert job.args == [WEDNESDAY]

    def test_run_delayed_past_midnight_reports_scheduled_day(self):
        fetched = []
        dispatcher = FakeDispatcher()
        clock = Clock(datetime(2025, 3, 12, 10, 0))
        s = ReportScheduler(
            is_holiday=lambda day: False,
            fetch_records=lambda day: fetched.append(day) or [],
            dispatcher=dispatcher,
            scheduler=FakeScheduler(),
            clock=clock,
            send_hours={day: 23 for day in range(7)},
            holiday_hour=14,
            misfire_grace_seconds=3600,
        )
        s.start()

        self.fire_at_send_time(s, datetime(2025, 3, 13, 0, 30))

        assert fetched == [WEDNESDAY]
        start, end, _ = dispatcher.sent[0]
        assert start == end == WEDNESDAY
        assert s.next_run == datetime(2025, 3, 13, 23, 0)

    def test_manual_fire_reports_today(self):
        dispatcher = FakeDispatcher()
        s = make_scheduler(datetime(2025, 3, 14, 9, 0), dispatcher=dispatcher)

        s.fire()

        assert dispatcher.sent[0][0] == FRIDAY

    def test_failed_delivery_still_rearms(self):
        s = make_scheduler(datetime(2025, 3, 12, 10, 0), dispatcher=FakeDispatcher(result=False))
        s.start()

        sent = self.fire_at_send_time(s, datetime(2025, 3, 12, 22, 0, 1))

        assert sent is False
        assert s.state == ARMED
        assert s.next_run == datetime(2025, 3, 13, 22, 0)

    def test_dispatch_exception_is_swallowed_and_rearms(self):
        s = make_scheduler(
            datetime(2025, 3, 12, 10, 0),
            dispatcher=FakeDispatcher(error=OSError("network down")),
        )
        s.start()

        sent = self.fire_at_send_time(s, datetime(2025, 3, 12, 22, 0, 1))

        assert sent is False
        assert s.next_run == datetime(2025, 3, 13, 22, 0)

    def test_record_fetch_failure_rearms(self):
        def broken(day):
            raise RuntimeError("db gone")

        clock = Clock(datetime(2025, 3, 12, 10, 0))
        s = ReportScheduler(lambda day: False, broken, FakeDispatcher(), scheduler=FakeScheduler(),
                            clock=clock, send_hours=SEND_HOURS, holiday_hour=14)
        s.start()

        assert self.fire_at_send_time(s, datetime(2025, 3, 12, 22, 0, 1)) is False
        assert s.state == ARMED

    def test_stop_during_dispatch_prevents_rearm(self):
        s = make_scheduler(datetime(2025, 3, 12, 10, 0))

        class StoppingDispatcher(FakeDispatcher):
            def send(inner, start, end, csv_payload):
                s.stop()
                return True

        s.dispatcher = StoppingDispatcher()
        s.start()

        self.fire_at_send_time(s, datetime(2025, 3, 12, 22, 0, 1))

        assert s.state == IDLE
        assert s.scheduler.jobs == {}

    def test_fires_once_per_day_across_a_week(self):
        dispatcher = FakeDispatcher()
        s = make_scheduler(datetime(2025, 3, 10, 8, 0), dispatcher=dispatcher, holidays=[FRIDAY])
        s.start()

        fired = []
        for _ in range(7):
            when = s.next_run
            fired.append(when)
            self.fire_at_send_time(s, when)

        assert [d.date() for d in fired] == [date(2025, 3, d) for d in range(10, 17)]
        assert fired[4] == datetime(2025, 3, 14, 14, 0)  # holiday Friday
        assert len(dispatcher.sent) == 7

    def test_missed_run_rearms(self):
        s = make_scheduler(datetime(2025, 3, 12, 10, 0))
        s.start()
        job = next(iter(s.scheduler.jobs.values()))
        s.scheduler.consume(job)
        s.clock.now = datetime(2025, 3, 13, 7, 0)

        callback, mask = s.scheduler.listeners[0]
        assert mask == EVENT_JOB_MISSED
        callback(JobExecutionEvent(EVENT_JOB_MISSED, job.id, "default", datetime(2025, 3, 12, 22, 0)))

        assert s.next_run == datetime(2025, 3, 13, 22, 0)
        assert len(s.scheduler.jobs) == 1

    def test_missed_event_for_other_job_is_ignored(self):
        s = make_scheduler(datetime(2025, 3, 12, 10, 0))
        s.start()
        before = set(s.scheduler.jobs)

        callback, _ = s.scheduler.listeners[0]
        callback(JobExecutionEvent(EVENT_JOB_MISSED, "something-else", "default", datetime(2025, 3, 12, 9, 0)))

        assert set(s.scheduler.jobs) == before
        assert all(job_id.startswith(JOB_PREFIX) for job_id in s.scheduler.jobs)
