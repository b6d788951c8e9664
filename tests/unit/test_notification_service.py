"""Tests for the delivery log and retry policy."""

from datetime import datetime, timedelta

import pytest

from clinic.models_notification import NotificationLog
from clinic.services.notification_service import NotificationService, retry_delay
from tests.conftest import FakeChannel


class FlakyChannel(FakeChannel):
    """Fails the first `failures` sends, then delivers."""

    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures

    async def send(self, to_phone, message_body):
        self.fail = self.calls < self.failures
        return await super().send(to_phone, message_body)


class BrokenChannel(FakeChannel):
    async def send(self, to_phone, message_body):
        raise RuntimeError("socket closed")


class TestRetryDelay:
    """Tests for retry_delay backoff."""

    def test_doubles_each_attempt(self) -> None:
        assert retry_delay(1, base_seconds=60) == timedelta(seconds=60)
        assert retry_delay(2, base_seconds=60) == timedelta(seconds=120)
        assert retry_delay(3, base_seconds=60) == timedelta(seconds=240)


class TestDeliver:
    """Tests for NotificationService.deliver."""

    @pytest.mark.asyncio
    async def test_sent_is_logged(self, db, channel) -> None:
        service = NotificationService(db, channel)

        delivered = await service.deliver("+919876543210", "hi", "test", "Appointment", 3)

        assert delivered is True
        log = db.query(NotificationLog).one()
        assert log.status == "sent"
        assert log.attempts == 1
        assert log.provider_message_sid == "SM0001"
        assert log.next_attempt_at is None

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, db, failing_channel) -> None:
        service = NotificationService(db, failing_channel)

        delivered = await service.deliver("+919876543210", "hi", "test")

        assert delivered is False
        log = db.query(NotificationLog).one()
        assert log.status == "failed"
        assert log.error_message == "carrier unavailable"
        assert log.next_attempt_at is not None

    @pytest.mark.asyncio
    async def test_unexpected_channel_error_is_logged(self, db) -> None:
        service = NotificationService(db, BrokenChannel())

        assert await service.deliver("+919876543210", "hi", "test") is False
        assert db.query(NotificationLog).one().error_message == "socket closed"

    @pytest.mark.asyncio
    async def test_missing_destination_recorded(self, db, failing_channel) -> None:
        service = NotificationService(db, failing_channel)

        await service.deliver(None, "hi", "test")

        log = db.query(NotificationLog).one()
        assert log.to_phone == ""
        assert log.status == "failed"
        assert log.next_attempt_at is None

    @pytest.mark.asyncio
    async def test_missing_destination_never_retried(self, db, failing_channel) -> None:
        service = NotificationService(db, failing_channel)
        await service.deliver(None, "hi", "test")

        summary = await service.retry_failed(now=datetime(2100, 1, 1))

        assert summary == {"retried": 0, "sent": 0, "failed": 0}
        assert failing_channel.calls == 1


class TestRetryFailed:
    """Tests for NotificationService.retry_failed."""

    @pytest.mark.asyncio
    async def test_due_message_resent(self, db) -> None:
        channel = FlakyChannel(failures=1)
        service = NotificationService(db, channel)
        await service.deliver("+919876543210", "hi", "test")
        log = db.query(NotificationLog).one()

        summary = await service.retry_failed(now=log.next_attempt_at)

        assert summary == {"retried": 1, "sent": 1, "failed": 0}
        db.refresh(log)
        assert log.status == "sent"
        assert log.attempts == 2

    @pytest.mark.asyncio
    async def test_not_yet_due_skipped(self, db, failing_channel) -> None:
        service = NotificationService(db, failing_channel)
        await service.deliver("+919876543210", "hi", "test")
        log = db.query(NotificationLog).one()

        summary = await service.retry_failed(now=log.next_attempt_at - timedelta(seconds=1))

        assert summary == {"retried": 0, "sent": 0, "failed": 0}
        assert failing_channel.calls == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, db, failing_channel) -> None:
        service = NotificationService(db, failing_channel, max_attempts=2)
        await service.deliver("+919876543210", "hi", "test")

        far_future = datetime(2100, 1, 1)
        first = await service.retry_failed(now=far_future)
        second = await service.retry_failed(now=far_future)

        assert first == {"retried": 1, "sent": 0, "failed": 1}
        assert second == {"retried": 0, "sent": 0, "failed": 0}
        log = db.query(NotificationLog).one()
        assert log.attempts == 2
        assert log.next_attempt_at is None

    @pytest.mark.asyncio
    async def test_sent_messages_never_retried(self, db, channel) -> None:
        service = NotificationService(db, channel)
        await service.deliver("+919876543210", "hi", "test")

        summary = await service.retry_failed(now=datetime(2100, 1, 1))

        assert summary["retried"] == 0
        assert channel.calls == 1
