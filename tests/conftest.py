"""Shared test fixtures for clinic booking tests."""

import os
from pathlib import Path
from typing import Generator, Optional

os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

import pytest  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from clinic import models_notification  # noqa: E402, F401
from clinic.database import Base, build_engine  # noqa: E402
from clinic.domain.appointments.service import AppointmentService  # noqa: E402
from clinic.exceptions import ChannelFailure  # noqa: E402
from clinic.models import Appointment, AppointmentStatus, User  # noqa: E402
from clinic.services.notification_service import NotificationService  # noqa: E402
from clinic.services.sms_service import NotificationChannel  # noqa: E402
from clinic.shared.locks import KeyedLocks  # noqa: E402


class FakeChannel(NotificationChannel):
    """Records outbound messages instead of calling a carrier."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, str]] = []
        self.calls = 0

    async def send(self, to_phone: str, message_body: str) -> Optional[str]:
        self.calls += 1
        if self.fail:
            raise ChannelFailure("carrier unavailable")
        self.sent.append((to_phone, message_body))
        return f"SM{len(self.sent):04d}"

    @property
    def last_body(self) -> str:
        return self.sent[-1][1]


class FakeClock:
    """Settable epoch-seconds clock."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def engine(tmp_path: Path):
    """SQLite file database, fresh per test."""
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def failing_channel() -> FakeChannel:
    return FakeChannel(fail=True)


@pytest.fixture
def patient(db: Session) -> User:
    user = User(username="Asha", phone="+919876543210", role="patient")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def make_appointment(db: Session, patient: User):
    """Factory for appointments owned by the sample patient."""

    def _make(
        total_sittings: int = 1,
        current_sitting: int = 0,
        status: AppointmentStatus = AppointmentStatus.PENDING,
        date: str = "2026-11-02",
        time: str = "09:30",
        service: str = "Root canal",
    ) -> Appointment:
        appointment = Appointment(
            user_id=patient.id,
            date=date,
            time=time,
            service=service,
            status=status.value,
            total_sittings=total_sittings,
            current_sitting=current_sitting,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def appointment_service(db: Session, channel: FakeChannel) -> AppointmentService:
    return AppointmentService(db, NotificationService(db, channel), locks=KeyedLocks())


@pytest.fixture
def failing_appointment_service(db: Session, failing_channel: FakeChannel) -> AppointmentService:
    return AppointmentService(db, NotificationService(db, failing_channel), locks=KeyedLocks())
