import smtplib
from datetime import date, datetime
from decimal import Decimal

import pytest

from clinicclock.config import Settings
from clinicclock.models import AttendanceRecord, AttendanceStatus, Employee
from clinicclock.services.mailer import EmailReportDispatcher
from clinicclock.services.report import (
    CSV_HEADER,
    ReportSummary,
    build_filename,
    build_subject,
    format_time_12h,
    generate_csv,
    summarize,
)


DAY = date(2025, 3, 12)


def employee(name):
    return Employee(id=f"emp-{name.lower()}", name=name, password_hash="x", uses_default_password=False)


def completed(name, clock_in, clock_out):
    return AttendanceRecord.open_for(employee(name), clock_in).with_clock_out(clock_out)


@pytest.fixture
def records():
    return [
        completed("Alice", datetime(2025, 3, 12, 9, 0), datetime(2025, 3, 12, 17, 30)),
        AttendanceRecord.open_for(employee("Bob"), datetime(2025, 3, 12, 13, 5)),
        AttendanceRecord(
            id="absent-1",
            employee_id="emp-carol",
            employee_name="Carol, RN",
            record_date=DAY,
            clock_in_time=datetime(2025, 3, 12, 0, 0),
            status=AttendanceStatus.ABSENT,
        ),
    ]


class TestFormatTime:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (datetime(2025, 3, 12, 0, 5), "12:05 AM"),
            (datetime(2025, 3, 12, 9, 0), "9:00 AM"),
            (datetime(2025, 3, 12, 12, 0), "12:00 PM"),
            (datetime(2025, 3, 12, 17, 30), "5:30 PM"),
            (None, ""),
        ],
    )
    def test_twelve_hour_clock(self, value, expected):
        assert format_time_12h(value) == expected


class TestGenerateCsv:
    def test_header_only_when_empty(self):
        assert generate_csv([]).splitlines() == [",".join(CSV_HEADER)]

    def test_rows(self, records):
        lines = generate_csv(records).splitlines()

        assert lines[0] == "Employee Name,Date,Clock In,Clock Out,Total Hours,Status"
        assert lines[1] == "Alice,2025-03-12,9:00 AM,5:30 PM,8.50,Complete"
        assert lines[2] == "Bob,2025-03-12,1:05 PM,,,Missing Clock-Out"

    def test_names_with_commas_are_quoted(self, records):
        lines = generate_csv(records).splitlines()
        assert lines[3].startswith('"Carol, RN",2025-03-12,')
        assert lines[3].endswith(",Absent")

    def test_negative_hours_are_kept(self):
        record = completed("Dan", datetime(2025, 3, 12, 17, 0), datetime(2025, 3, 12, 16, 0))
        assert record.total_hours == Decimal("-1.00")
        assert ",-1.00,Complete" in generate_csv([record])


class TestSummary:
    def test_counts_by_status(self, records):
        assert summarize(generate_csv(records)) == ReportSummary(present=1, missing_clock_out=1, absent=1)

    def test_empty_payload(self):
        assert summarize("") == ReportSummary(0, 0, 0)


class TestNaming:
    def test_single_day(self):
        assert build_subject("Wellness on Wellington", DAY, DAY) == (
            "Wellness on Wellington - Attendance Report 2025-03-12"
        )
        assert build_filename(DAY, DAY) == "attendance_2025-03-12.csv"

    def test_range(self):
        end = date(2025, 3, 31)
        assert build_subject("Clinic", DAY, end) == "Clinic - Attendance Report 2025-03-12 to 2025-03-31"
        assert build_filename(DAY, end) == "attendance_2025-03-12_to_2025-03-31.csv"


def smtp_settings(**overrides):
    values = dict(
        clinic_name="Clinic",
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="kiosk@example.com",
        smtp_password="app-password",
        sender_name="Clinic Kiosk",
        report_recipients=["manager@example.com", "owner@example.com"],
    )
    values.update(overrides)
    return Settings(**values)


class FakeSMTP:
    instances = []
    fail_with = None

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.calls = []
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user))
        if FakeSMTP.fail_with:
            raise FakeSMTP.fail_with

    def send_message(self, msg):
        self.messages.append(msg)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_with = None
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


class TestEmailReportDispatcher:
    def test_not_configured_skips_sending(self, fake_smtp, records):
        dispatcher = EmailReportDispatcher(smtp_settings(report_recipients=[]))

        assert dispatcher.send(DAY, DAY, generate_csv(records)) is False
        assert fake_smtp.instances == []

    def test_sends_with_starttls_and_attachment(self, fake_smtp, records):
        dispatcher = EmailReportDispatcher(smtp_settings())

        assert dispatcher.send(DAY, DAY, generate_csv(records)) is True

        server = fake_smtp.instances[0]
        assert (server.host, server.port) == ("smtp.example.com", 587)
        assert server.calls == ["starttls", ("login", "kiosk@example.com")]

        msg = server.messages[0]
        assert msg["Subject"] == "Clinic - Attendance Report 2025-03-12"
        assert msg["To"] == "manager@example.com, owner@example.com"
        assert "kiosk@example.com" in msg["From"]

        attachments = list(msg.iter_attachments())
        assert [a.get_filename() for a in attachments] == ["attendance_2025-03-12.csv"]
        assert "Alice,2025-03-12" in attachments[0].get_content()
        assert "Missing clock-out:      1" in msg.get_body(("plain",)).get_content()

    def test_sender_email_overrides_login(self, fake_smtp):
        dispatcher = EmailReportDispatcher(smtp_settings(sender_email="reports@example.com"))
        msg = dispatcher.build_message(DAY, DAY, generate_csv([]))
        assert "reports@example.com" in msg["From"]

    def test_smtp_failure_returns_false(self, fake_smtp, records):
        fake_smtp.fail_with = smtplib.SMTPAuthenticationError(535, b"bad credentials")
        dispatcher = EmailReportDispatcher(smtp_settings())

        assert dispatcher.send(DAY, DAY, generate_csv(records)) is False

    def test_connection_failure_returns_false(self, monkeypatch, records):
        def refuse(*args, **kwargs):
            raise ConnectionRefusedError("no route")

        monkeypatch.setattr(smtplib, "SMTP", refuse)
        dispatcher = EmailReportDispatcher(smtp_settings())

        assert dispatcher.send(DAY, DAY, generate_csv(records)) is False
