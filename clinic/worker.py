"""
ARQ Background Worker
Retries notifications that failed to send inline
"""

import logging
import os
from typing import Optional

from arq.connections import RedisSettings
from arq.cron import cron

from . import config

# Import all model files to ensure all models are registered
from . import models  # noqa: F401 - Main models
from . import models_notification  # noqa: F401 - Delivery log
from .database import SessionLocal
from .services.notification_service import NotificationService
from .services.sms_service import TwilioChannel

logger = logging.getLogger(__name__)


def get_redis_settings(redis_url: Optional[str] = None) -> RedisSettings:
    """Connection settings for the worker, shared with the OTP store's Redis"""
    redis_url = redis_url or config.REDIS_URL

    if redis_url:
        # redis:// or rediss:// (TLS), credentials inline
        settings = RedisSettings.from_dsn(redis_url)
    else:
        settings = RedisSettings(
            host=config.REDIS_HOST,
            port=config.REDIS_PORT,
            password=config.REDIS_PASSWORD,
            ssl=config.REDIS_SSL,
        )

    settings.conn_timeout = 15
    settings.conn_retry_delay = 1
    return settings


async def retry_failed_notifications_task(ctx):
    """
    Cron job re-sending failed SMS whose backoff has elapsed.

    Args:
        ctx: ARQ context

    Returns:
        dict with retried/sent/failed counts
    """
    logger.info(f"🔁 ARQ Worker: notification retry pass (job {ctx.get('job_id', 'cron')})")

    db = SessionLocal()
    try:
        service = NotificationService(db, TwilioChannel.from_config())
        return await service.retry_failed()
    except Exception as e:
        logger.error(f"❌ Notification retry pass failed: {str(e)}")
        raise
    finally:
        db.close()


class WorkerSettings:
    """ARQ Worker Settings"""

    functions = [retry_failed_notifications_task]
    redis_settings = get_redis_settings()

    max_jobs = int(os.getenv("ARQ_MAX_JOBS", "10"))
    job_timeout = int(os.getenv("ARQ_JOB_TIMEOUT", "300"))
    keep_result = int(os.getenv("ARQ_KEEP_RESULT", "3600"))

    health_check_interval = 60

    # Every minute; the delivery log's own backoff decides what is due
    cron_jobs = [cron(retry_failed_notifications_task, second=0)]
