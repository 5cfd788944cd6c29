import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# MongoDB
MONGODB_URL = os.getenv("MONGODB_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "aashray_db")
DB_MAX_RETRIES = int(os.getenv("DB_MAX_RETRIES", "3"))
DB_RETRY_DELAY = float(os.getenv("DB_RETRY_DELAY", "1"))  # seconds

# Notifications: "log" writes messages to the application log, "twilio" sends SMS
NOTIFIER_BACKEND = os.getenv("NOTIFIER_BACKEND", "log").lower()
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_FROM_NUMBER = os.getenv("TWILIO_FROM_NUMBER")
DEFAULT_COUNTRY_CODE = os.getenv("DEFAULT_COUNTRY_CODE", "91")
NOTIFICATION_TIMEOUT_SECONDS = float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "10"))

# Rating aggregation
RATING_CAS_MAX_RETRIES = int(os.getenv("RATING_CAS_MAX_RETRIES", "5"))

# Header set by the upstream identity provider once the caller is authenticated
IDENTITY_HEADER = os.getenv("IDENTITY_HEADER", "X-User-Id")

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "10000"))
