import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./medislot.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Payment gateway callback signing secret (shared with the gateway)
PAYMENT_WEBHOOK_SECRET = os.getenv("PAYMENT_WEBHOOK_SECRET", "")

# Booking rules
# 1 = appointments can be booked for tomorrow or later
BOOKING_LEAD_DAYS = int(os.getenv("BOOKING_LEAD_DAYS", "1"))

# Weekly schedule rows created for every new doctor
DEFAULT_SCHEDULE_START = os.getenv("DEFAULT_SCHEDULE_START", "10:00")
DEFAULT_SCHEDULE_END = os.getenv("DEFAULT_SCHEDULE_END", "17:00")
# Minimum length of an edited schedule window
MIN_SCHEDULE_HOURS = int(os.getenv("MIN_SCHEDULE_HOURS", "2"))
