"""OTP service - Issue and verify phone one-time passcodes"""

import logging
import secrets
import time
from typing import Callable, Optional

from ...config import OTP_BYPASS_CODE, OTP_TTL_SECONDS
from ...exceptions import InvalidClaimError
from ...services.sms_service import NotificationChannel, otp_message
from ...shared.validators import normalize_phone
from .store import OtpEntry, OtpStore

logger = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999


def generate_code() -> int:
    """Uniformly random 6-digit code from a cryptographically secure source"""
    return OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1)


class OtpService:
    """Service layer for the phone verification gate"""

    def __init__(
        self,
        store: OtpStore,
        channel: NotificationChannel,
        ttl_seconds: int = OTP_TTL_SECONDS,
        bypass_code: Optional[str] = OTP_BYPASS_CODE,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.channel = channel
        self.ttl_seconds = ttl_seconds
        self.bypass_code = bypass_code
        self.clock = clock

    async def issue(self, raw_phone: str, display_name: Optional[str] = None) -> int:
        """
        Generate a code for the phone, replacing any earlier one, and text it.

        The code is stored before sending, so a ChannelFailure leaves it
        verifiable; the failure still propagates to the caller.
        """
        phone = normalize_phone(raw_phone)
        code = generate_code()

        self.store.put(OtpEntry(phone=phone, code=code, expires_at=self.clock() + self.ttl_seconds))
        logger.info(f"🔑 OTP issued for {phone} (expires in {self.ttl_seconds}s)")
        logger.debug(f"🔢 Generated OTP for {phone}: {code}")

        await self.channel.send(phone, otp_message(display_name, code))
        return code

    def verify(self, raw_phone: str, claimed_code) -> bool:
        """
        Accept a live matching code (single use) or the bypass code.
        Rejections leave the stored code in place.
        """
        phone = normalize_phone(raw_phone)
        claimed = str(claimed_code).strip() if claimed_code is not None else ""

        if self.bypass_code and claimed == self.bypass_code:
            self.store.discard(phone)
            logger.warning(f"⚠️ OTP bypass code used for {phone}")
            return True

        if self.store.consume(phone, claimed):
            logger.info(f"✅ OTP verified for {phone}")
            return True

        logger.info(f"🔍 OTP rejected for {phone}")
        raise InvalidClaimError("Invalid or Expired OTP")
