"""
Twilio SMS Channel
Sends outbound text messages and builds the message bodies for each workflow event
"""

import logging
from typing import Optional

import httpx

from .. import config
from ..exceptions import ChannelFailure

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


class NotificationChannel:
    """Outbound message carrier. Implementations raise ChannelFailure when a send fails."""

    async def send(self, to_phone: str, message_body: str) -> Optional[str]:
        """Send a message and return the provider's message id"""
        raise NotImplementedError


class TwilioChannel(NotificationChannel):
    """Send SMS through the Twilio Messages API"""

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_phone: Optional[str] = None,
        messaging_service_sid: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_phone = from_phone
        self.messaging_service_sid = messaging_service_sid
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> "TwilioChannel":
        return cls(
            account_sid=config.TWILIO_ACCOUNT_SID,
            auth_token=config.TWILIO_AUTH_TOKEN,
            from_phone=config.TWILIO_PHONE_NUMBER,
            messaging_service_sid=config.TWILIO_MESSAGING_SERVICE_SID,
            timeout=config.TWILIO_TIMEOUT_SECONDS,
        )

    async def send(self, to_phone: str, message_body: str) -> Optional[str]:
        if not to_phone:
            raise ChannelFailure("No phone number provided")

        # Twilio only accepts E.164 destinations
        if not to_phone.startswith("+"):
            logger.warning(f"Phone number not in E.164 format: {to_phone}")
            raise ChannelFailure("Phone number must be in E.164 format (e.g., +911234567890)")

        if not self.account_sid or not self.auth_token:
            logger.warning("Twilio credentials not configured - SMS not sent")
            raise ChannelFailure("Twilio credentials not configured")

        data = {
            "To": to_phone,
            "Body": message_body,
        }
        if self.messaging_service_sid:
            data["MessagingServiceSid"] = self.messaging_service_sid
        elif self.from_phone:
            data["From"] = self.from_phone
        else:
            raise ChannelFailure("No sender configured (TWILIO_PHONE_NUMBER or messaging service)")

        logger.info(f"🚀 Sending SMS to Twilio API for {to_phone}")
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{TWILIO_API_BASE}/Accounts/{self.account_sid}/Messages.json",
                    auth=(self.account_sid, self.auth_token),
                    data=data,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logger.error(f"Twilio API error: {str(e)}")
            raise ChannelFailure(f"Twilio request failed: {str(e)}") from e

        logger.info(f"📡 Twilio API response status: {response.status_code}")

        if response.status_code in [200, 201]:
            try:
                message_sid = response.json().get("sid")
            except (ValueError, AttributeError) as e:
                logger.error(f"❌ Unreadable Twilio response body (status {response.status_code})")
                raise ChannelFailure("Twilio returned an unreadable response") from e
            logger.info(f"✅ SMS sent successfully to {to_phone} (SID: {message_sid})")
            return message_sid

        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        error_message = error_data.get("message", "Unknown error")
        error_code = error_data.get("code")

        logger.error(f"❌ Twilio API error [{error_code}]: {error_message}")
        raise ChannelFailure(f"[{error_code}] {error_message}" if error_code else error_message)


_channel: Optional[NotificationChannel] = None


def get_notification_channel() -> NotificationChannel:
    """FastAPI dependency returning the process-wide channel"""
    global _channel

    if _channel is None:
        _channel = TwilioChannel.from_config()
    return _channel


# SMS Template Functions
def otp_message(display_name: Optional[str], code: int) -> str:
    return f"Hello {display_name or 'User'}, your OTP is: {code}"


def appointment_confirmed_message(username: Optional[str], service: str, date: str, time: str) -> str:
    return (
        f"Hello {username or 'User'}, appointment confirmed for {service} "
        f"on {date} at {time}."
    )


def appointment_cancelled_message(date: str) -> str:
    return f"Appointment on {date} has been CANCELLED."


def sitting_done_message(sitting: int, service: str, next_date: str, next_time: str) -> str:
    return (
        f"Sitting {sitting} for {service} is done. "
        f"Next sitting: {next_date} at {next_time}."
    )


def treatment_completed_message(service: str) -> str:
    return (
        f"Treatment for {service} is fully completed! "
        f"Thank you for choosing {config.CLINIC_NAME}."
    )
