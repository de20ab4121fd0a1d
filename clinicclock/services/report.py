# ClinicClock - Attendance Report
# CSV export and the pieces of the report email built around it

import csv
import io
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

from clinicclock.models.attendance_record import AttendanceRecord, AttendanceStatus


CSV_HEADER = ["Employee Name", "Date", "Clock In", "Clock Out", "Total Hours", "Status"]


def format_time_12h(value: Optional[datetime]) -> str:
    """Render a time as h:mm AM/PM, or an empty string when missing."""
    if value is None:
        return ""
    hour = value.hour % 12 or 12
    period = "PM" if value.hour >= 12 else "AM"
    return f"{hour}:{value.minute:02d} {period}"


def report_row(record: AttendanceRecord) -> list[str]:
    hours = f"{record.total_hours:.2f}" if record.total_hours is not None else ""
    return [
        record.employee_name,
        record.record_date.isoformat(),
        format_time_12h(record.clock_in_time),
        format_time_12h(record.clock_out_time),
        hours,
        record.status.label,
    ]


def generate_csv(records: Iterable[AttendanceRecord]) -> str:
    """
    Convert attendance records to an RFC 4180 CSV string.
    
    Columns: Employee Name, Date, Clock In, Clock Out, Total Hours, Status
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for record in records:
        writer.writerow(report_row(record))
    return buffer.getvalue()


def format_date_range(start: date, end: date) -> str:
    if start == end:
        return start.isoformat()
    return f"{start.isoformat()} to {end.isoformat()}"


def build_subject(clinic_name: str, start: date, end: date) -> str:
    return f"{clinic_name} - Attendance Report {format_date_range(start, end)}"


def build_filename(start: date, end: date) -> str:
    if start == end:
        return f"attendance_{start.isoformat()}.csv"
    return f"attendance_{start.isoformat()}_to_{end.isoformat()}.csv"


@dataclass(frozen=True)
class ReportSummary:
    """Per-status counts shown in the body of the report email."""
    present: int
    missing_clock_out: int
    absent: int


def summarize(csv_payload: str) -> ReportSummary:
    """
    Count statuses in a CSV produced by generate_csv.
    
    Works from the payload rather than the records so the dispatcher
    only ever needs the CSV text.
    """
    counts = {status.label: 0 for status in AttendanceStatus}
    rows = csv.reader(io.StringIO(csv_payload))
    next(rows, None)  # header
    for row in rows:
        if len(row) == len(CSV_HEADER) and row[-1] in counts:
            counts[row[-1]] += 1
    
    return ReportSummary(
        present=counts[AttendanceStatus.COMPLETE.label],
        missing_clock_out=counts[AttendanceStatus.MISSING_CLOCK_OUT.label],
        absent=counts[AttendanceStatus.ABSENT.label],
    )


def build_body(clinic_name: str, subject: str, summary: ReportSummary) -> str:
    return (
        f"{subject}\n"
        "\n"
        "Summary\n"
        "-----------------------\n"
        f"Present (complete):     {summary.present}\n"
        f"Missing clock-out:      {summary.missing_clock_out}\n"
        f"Absent:                 {summary.absent}\n"
        "\n"
        "The full attendance log is attached as a CSV file.\n"
        "\n"
        f"Sent automatically by {clinic_name}\n"
    )
