import logging
import os
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinic.db")

# Phone numbers without a leading "+" are treated as domestic
DEFAULT_COUNTRY_CODE = os.getenv("DEFAULT_COUNTRY_CODE", "+91")

# OTP Configuration
OTP_TTL_SECONDS = int(os.getenv("OTP_TTL_SECONDS", "600"))
# Support/testing code accepted for any phone. Set to an empty string to disable.
OTP_BYPASS_CODE = os.getenv("OTP_BYPASS_CODE", "123456")
if OTP_BYPASS_CODE:
    logger.warning("OTP bypass code is enabled - disable OTP_BYPASS_CODE in production")

# Registering with this secret grants the admin role. Unset disables elevation.
ADMIN_REGISTRATION_SECRET = os.getenv("ADMIN_REGISTRATION_SECRET")

# Twilio Configuration
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER")
TWILIO_MESSAGING_SERVICE_SID = os.getenv("TWILIO_MESSAGING_SERVICE_SID")
TWILIO_TIMEOUT_SECONDS = float(os.getenv("TWILIO_TIMEOUT_SECONDS", "10"))

CLINIC_NAME = os.getenv("CLINIC_NAME", "Amrutha Dental Clinic")

# Delivery log retry policy (used by the arq worker)
NOTIFICATION_MAX_ATTEMPTS = int(os.getenv("NOTIFICATION_MAX_ATTEMPTS", "5"))
NOTIFICATION_RETRY_BASE_SECONDS = int(os.getenv("NOTIFICATION_RETRY_BASE_SECONDS", "60"))

# Redis (OTP store + background worker). REDIS_URL wins over the host settings.
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"

# CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")
