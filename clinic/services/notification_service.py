"""
Notification Delivery Service
Records every outbound message, attempts delivery once inline and leaves
failed messages for the background worker to retry with backoff
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ..config import NOTIFICATION_MAX_ATTEMPTS, NOTIFICATION_RETRY_BASE_SECONDS
from ..exceptions import ChannelFailure
from ..models_notification import DeliveryStatus, NotificationLog
from .sms_service import NotificationChannel

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def retry_delay(attempts: int, base_seconds: int = NOTIFICATION_RETRY_BASE_SECONDS) -> timedelta:
    """Exponential backoff: base, 2*base, 4*base, ..."""
    return timedelta(seconds=base_seconds * 2 ** max(attempts - 1, 0))


class NotificationService:
    """Hands notification intents to the channel and keeps the delivery log"""

    def __init__(
        self,
        db: Session,
        channel: NotificationChannel,
        max_attempts: int = NOTIFICATION_MAX_ATTEMPTS,
    ):
        self.db = db
        self.channel = channel
        self.max_attempts = max_attempts

    async def deliver(
        self,
        to_phone: Optional[str],
        message_body: str,
        message_type: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
    ) -> bool:
        """
        Log and send a message. Returns True when the channel accepted it.
        Channel failures are recorded, never raised.
        """
        log = NotificationLog(
            to_phone=to_phone or "",
            message_body=message_body,
            message_type=message_type,
            entity_type=entity_type,
            entity_id=entity_id,
            status=DeliveryStatus.PENDING.value,
            attempts=0,
        )
        self.db.add(log)
        self.db.commit()
        self.db.refresh(log)

        logger.info(f"📱 Preparing SMS: type={message_type}, to={log.to_phone}, log_id={log.id}")
        return await self._attempt(log)

    async def _attempt(self, log: NotificationLog, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        log.attempts += 1

        try:
            message_sid = await self.channel.send(log.to_phone, log.message_body)
        except ChannelFailure as e:
            self._mark_failed(log, e.detail, now)
            logger.warning(f"⚠️ SMS {log.id} ({log.message_type}) failed: {e.detail}")
            return False
        except Exception as e:
            self._mark_failed(log, str(e), now)
            logger.exception(f"❌ Unexpected error sending SMS {log.id}: {str(e)}")
            return False

        log.status = DeliveryStatus.SENT.value
        log.provider_message_sid = message_sid
        log.error_message = None
        log.next_attempt_at = None
        self.db.commit()
        return True

    def _mark_failed(self, log: NotificationLog, error: str, now: datetime) -> None:
        log.status = DeliveryStatus.FAILED.value
        log.error_message = error
        # A message with no destination can never succeed
        if log.to_phone and log.attempts < self.max_attempts:
            log.next_attempt_at = now + retry_delay(log.attempts)
        else:
            log.next_attempt_at = None
        self.db.commit()

    def get_due_retries(self, now: datetime) -> list[NotificationLog]:
        return (
            self.db.query(NotificationLog)
            .filter(
                NotificationLog.status == DeliveryStatus.FAILED.value,
                NotificationLog.attempts < self.max_attempts,
                NotificationLog.next_attempt_at.isnot(None),
                NotificationLog.next_attempt_at <= now,
            )
            .order_by(NotificationLog.id)
            .all()
        )

    async def retry_failed(self, now: Optional[datetime] = None) -> dict:
        """Re-send failed messages whose backoff has elapsed"""
        now = now or utcnow()
        due = self.get_due_retries(now)

        sent = 0
        for log in due:
            if await self._attempt(log, now):
                sent += 1

        summary = {"retried": len(due), "sent": sent, "failed": len(due) - sent}
        if due:
            logger.info(f"🔁 Notification retry pass complete: {summary}")
        return summary
