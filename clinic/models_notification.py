"""
Notification Delivery Models
Every outbound SMS is recorded here so failed sends can be retried by the worker
"""

from enum import Enum

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class NotificationLog(Base):
    """Track SMS messages handed to the notification channel"""

    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True, index=True)

    # Message details
    to_phone = Column(String(32), nullable=False)
    message_body = Column(Text, nullable=False)
    message_type = Column(String(50), nullable=False)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(Integer, nullable=True)

    # Delivery state
    status = Column(String(20), default=DeliveryStatus.PENDING.value, nullable=False, index=True)
    attempts = Column(Integer, default=0, nullable=False)
    provider_message_sid = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)
    next_attempt_at = Column(DateTime, nullable=True, index=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
