import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Config:
    SERVICE_NAME = "Originate API"
    API_VERSION = "1.0.0"

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///originate.sqlite3")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Tokens are issued by the identity provider; only verification happens here.
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "change-me")
    JWT_DECODE_AUDIENCE = os.environ.get("JWT_DECODE_AUDIENCE") or None
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=int(os.environ.get("JWT_ACCESS_TOKEN_MINUTES", "60")))

    CORS_ORIGINS = _split_origins(os.environ.get("ALLOWED_ORIGINS", "http://localhost:5173"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FILE = os.environ.get("LOG_FILE") or None

    # Per client address, across every route.
    RATELIMIT_DEFAULT = os.environ.get("RATELIMIT_DEFAULT", "100 per 15 minutes")
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_STRATEGY = "fixed-window"
    RATELIMIT_HEADERS_ENABLED = True

    ORDER_LIST_LIMIT = 200
