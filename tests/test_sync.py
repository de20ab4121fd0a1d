import logging
from datetime import date, datetime

from clinicclock.models import AttendanceRecord, Employee, PublicHoliday
from clinicclock.services.sync import (
    InMemorySyncClient,
    NullSyncClient,
    SafeSync,
    SyncClient,
    attendance_document,
    employee_document,
)


class BrokenClient(SyncClient):
    def upsert_employee(self, employee):
        raise ConnectionError("replica offline")

    def delete_employee(self, employee_id):
        raise ConnectionError("replica offline")


def alice():
    return Employee(
        id="emp-alice",
        name="Alice",
        password_hash="$2b$04$hash",
        uses_default_password=False,
        created_at=datetime(2025, 1, 2, 8, 0),
    )


def test_employee_document():
    assert employee_document(alice()) == {
        "id": "emp-alice",
        "name": "Alice",
        "password_hash": "$2b$04$hash",
        "is_default_password": False,
        "created_at": "2025-01-02T08:00:00",
    }


def test_attendance_document_for_open_and_completed():
    record = AttendanceRecord.open_for(alice(), datetime(2025, 3, 12, 9, 0))
    doc = attendance_document(record)
    assert doc["date"] == "2025-03-12"
    assert doc["clock_out_time"] is None
    assert doc["total_hours"] is None
    assert doc["status"] == "missing_clock_out"

    done = attendance_document(record.with_clock_out(datetime(2025, 3, 12, 13, 15)))
    assert done["id"] == record.id
    assert done["total_hours"] == 4.25
    assert done["status"] == "complete"


def test_in_memory_client_upserts_and_deletes():
    client = InMemorySyncClient()
    sync = SafeSync(client)
    holiday = PublicHoliday(id="hol-1", holiday_date=date(2025, 12, 25), name="Christmas Day")

    assert sync.upsert_employee(alice()) is True
    assert sync.upsert_public_holiday(holiday) is True
    assert client.collections["public_holidays"]["hol-1"]["date"] == "2025-12-25"

    sync.delete_employee("emp-alice")
    sync.delete_public_holiday("hol-1")
    assert client.collections["employees"] == {}
    assert client.collections["public_holidays"] == {}


def test_failures_are_logged_not_raised(caplog):
    sync = SafeSync(BrokenClient())

    with caplog.at_level(logging.ERROR, logger="clinicclock.services.sync"):
        assert sync.upsert_employee(alice()) is False
        assert sync.delete_employee("emp-alice") is False

    assert "upsert_employee(emp-alice)" in caplog.text


def test_default_is_null_client():
    assert isinstance(SafeSync().client, NullSyncClient)
    assert SafeSync().delete_employee("anything") is True
