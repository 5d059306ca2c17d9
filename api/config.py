"""
Environment-aware configuration.
Token secrets, lifetimes, cookie flags, CORS origin and the database URL
are all read from the environment (or a .env file).
"""
import os
import re
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d|w)?\s*$")
_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}


def parse_duration(value: str | int) -> timedelta:
    """
    Turn "15m", "7d", "3600" (seconds) into a timedelta.
    Raises ValueError on anything else.
    """
    if isinstance(value, int):
        return timedelta(seconds=value)
    match = _DURATION_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return _UNITS[unit or "s"] * float(amount)


class BaseConfig:
    # Flask signs its own cookies with SECRET_KEY
    SECRET_KEY = os.getenv("COOKIE_SECRET", os.getenv("SECRET_KEY", "dev-cookie-secret"))
    DEBUG = False
    TESTING = False
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # The React client sends cookies, so a single explicit origin is used
    CORS_ORIGINS = os.getenv("FRONTEND_URL", "http://localhost:5173")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///fittrack.db")

    JWT_SECRET = os.getenv("JWT_SECRET", "dev-access-secret-change-me")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret-change-me")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "fittrack-api")
    JWT_ACCESS_TOKEN_EXPIRES = parse_duration(os.getenv("JWT_EXPIRES_IN", "15m"))
    JWT_REFRESH_TOKEN_EXPIRES = parse_duration(os.getenv("JWT_REFRESH_EXPIRES_IN", "7d"))

    MAX_SESSIONS_PER_USER = int(os.getenv("MAX_SESSIONS_PER_USER", "10"))

    ACCESS_COOKIE_NAME = "accessToken"
    REFRESH_COOKIE_NAME = "refreshToken"
    COOKIE_SECURE = False
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Lax")


class DevelopmentConfig(BaseConfig):
    APP_ENV = "dev"
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    APP_ENV = "test"
    TESTING = True
    DATABASE_URL = "sqlite://"
    JWT_SECRET = "test-access-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    MAX_SESSIONS_PER_USER = 5


class ProductionConfig(BaseConfig):
    APP_ENV = "prod"
    DEBUG = False
    COOKIE_SECURE = True


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
