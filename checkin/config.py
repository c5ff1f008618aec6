import os

from dotenv import load_dotenv

# Load environment variables if in development
if os.getenv("ENVIRONMENT") == "development":
    load_dotenv()


SQLALCHEMY_DATABASE_URL = os.getenv("DB_URL_STRING", "sqlite:///./checkin.db")

SECRET_KEY = os.getenv("SECRET_KEY", "checkin-dev-secret-change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
# Login lives with the identity provider; only advertised in the OpenAPI docs
IDENTITY_TOKEN_URL = os.getenv("IDENTITY_TOKEN_URL", "http://localhost:9000/oauth/token")

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")

# Host displays rotate the token more often than it expires.
TOKEN_FRESHNESS_MS = 10_000
QR_REFRESH_SECONDS = int(os.getenv("QR_REFRESH_SECONDS", "7"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
