# ClinicClock - Test fixtures
#
# bcrypt is intentionally slow. The cost is turned down for the suite and
# hashes are computed once per session and reused.

import os

os.environ.setdefault("CLINICCLOCK_DATABASE_URL", "sqlite://")
os.environ.setdefault("CLINICCLOCK_BCRYPT_ROUNDS", "4")
os.environ.setdefault("CLINICCLOCK_REPORT_SCHEDULER_ENABLED", "false")
os.environ.setdefault("CLINICCLOCK_CREATE_TABLES_ON_STARTUP", "false")

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinicclock import database  # noqa: F401  registers the SQLite foreign key pragma
from clinicclock.models import AdminUser, AttendanceRecord, Base, Employee
from clinicclock.services.passwords import DEFAULT_PASSWORD, hash_password


CORRECT_PASSWORD = "secret7"
WRONG_PASSWORD = "wrong99"
ADMIN_PASSWORD = "AdminP1"


@pytest.fixture(scope="session")
def correct_hash():
    return hash_password(CORRECT_PASSWORD)


@pytest.fixture(scope="session")
def default_hash():
    return hash_password(DEFAULT_PASSWORD)


@pytest.fixture(scope="session")
def admin_hash():
    return hash_password(ADMIN_PASSWORD)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def regular_employee(db, correct_hash):
    """An employee who has already chosen a personal password."""
    employee = Employee(
        id="emp-regular",
        name="Alice",
        password_hash=correct_hash,
        uses_default_password=False,
        created_at=datetime(2024, 1, 1),
    )
    db.add(employee)
    db.commit()
    return employee


@pytest.fixture
def first_time_employee(db, default_hash):
    """A new employee still on the default password."""
    employee = Employee.create(name="Bob", default_password_hash=default_hash)
    db.add(employee)
    db.commit()
    return employee


@pytest.fixture
def admin_user(db, admin_hash):
    admin = AdminUser(id="admin-1", username="manager", password_hash=admin_hash)
    db.add(admin)
    db.commit()
    return admin


def make_open_record(employee, clock_in):
    return AttendanceRecord.open_for(employee, clock_in)


def make_completed_record(employee, clock_in, clock_out):
    return AttendanceRecord.open_for(employee, clock_in).with_clock_out(clock_out)
