from dotenv import load_dotenv
import os

# Load environment variables from .env file
load_dotenv()

# Database configuration
DB_HOST = os.getenv("MYSQL_HOST", "db")
DB_USER = os.getenv("MYSQL_USER", "user")
DB_PASSWORD = os.getenv("MYSQL_PASSWORD", "123456")
DB_NAME = os.getenv("MYSQL_DB", "apartment_booking")
DB_PORT = os.getenv("MYSQL_PORT", "3306")

# Transient storage failures (deadlock, lost connection) are retried this many times
DB_MAX_RETRIES = int(os.getenv("DB_MAX_RETRIES", "3"))
DB_RETRY_BACKOFF_SECONDS = float(os.getenv("DB_RETRY_BACKOFF_SECONDS", "0.05"))

# JWT configuration
SECRET_KEY = os.getenv("SECRET_KEY", "your_secret_key_here")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Application configuration
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# Bootstrap administrator, created on startup when both are set
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Administrator")

# Lease expiry job
LEASE_EXPIRY_JOB_ENABLED = os.getenv("LEASE_EXPIRY_JOB_ENABLED", "true").lower() == "true"
LEASE_EXPIRY_INTERVAL_MINUTES = int(os.getenv("LEASE_EXPIRY_INTERVAL_MINUTES", "60"))

# Email configuration
EMAIL_ENABLED = os.getenv("EMAIL_ENABLED", "false").lower() == "true"
EMAIL_FROM = os.getenv("EMAIL_FROM", "no-reply@apartment-booking.com")
EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "Apartment Booking")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "1025"))
EMAIL_SERVER = os.getenv("EMAIL_SERVER", "mailhog")

# Database URL
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)
