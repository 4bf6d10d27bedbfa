"""
Environment-aware configuration.
One place of truth: every service (tokens, hasher, stores, Discogs linker)
is built from these values in services.init_app, never from os.getenv calls.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present

DEV_JWT_SECRET = "dev-secret-change-me"


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE = os.getenv("LOG_FILE")

    # Storage
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///vinyl-auth.db")
    SQL_ECHO = _env_bool("SQL_ECHO")

    # Session tokens
    JWT_SECRET = os.getenv("JWT_SECRET", DEV_JWT_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    SESSION_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("SESSION_TOKEN_EXPIRES_SECONDS", "7200")))
    SESSION_REFRESH_EXPIRES = timedelta(seconds=int(os.getenv("SESSION_REFRESH_EXPIRES_SECONDS", "86400")))
    # Optional cap on how long after expiry an authentic token may still be
    # exchanged at /auth/refresh; unset means any authentic token is accepted
    SESSION_REFRESH_GRACE = (
        timedelta(seconds=int(os.environ["SESSION_REFRESH_GRACE_SECONDS"]))
        if os.getenv("SESSION_REFRESH_GRACE_SECONDS")
        else None
    )
    AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "token")
    COOKIE_SECURE = _env_bool("COOKIE_SECURE")

    # Credentials
    PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "6"))
    PASSWORD_RESET_EXPIRES = timedelta(seconds=int(os.getenv("PASSWORD_RESET_EXPIRES_SECONDS", "3600")))

    # Front-end pages the API redirects to
    APP_URL = os.getenv("APP_URL", "http://localhost:3000")
    LOGIN_URL = os.getenv("LOGIN_URL", "/login")
    PROFILE_URL = os.getenv("PROFILE_URL", "/profile")

    # Discogs OAuth 1.0a
    DISCOGS_CONSUMER_KEY = os.getenv("DISCOGS_CONSUMER_KEY")
    DISCOGS_CONSUMER_SECRET = os.getenv("DISCOGS_CONSUMER_SECRET")
    DISCOGS_CALLBACK_URL = os.getenv(
        "DISCOGS_CALLBACK_URL", f"{APP_URL}/api/v1/auth/discogs/callback"
    )
    DISCOGS_USER_AGENT = os.getenv("DISCOGS_USER_AGENT", "VinylCollectionApp/1.0")
    DISCOGS_TIMEOUT_SECONDS = float(os.getenv("DISCOGS_TIMEOUT_SECONDS", "10"))
    DISCOGS_HANDSHAKE_MAX_AGE = timedelta(minutes=10)


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    DEBUG = False
    COOKIE_SECURE = True


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite:///:memory:"
    SESSION_REFRESH_GRACE = None
    SQL_ECHO = False
    JWT_SECRET = "test-jwt-secret"
    COOKIE_SECURE = False
    LOG_FILE = None
    DISCOGS_CONSUMER_KEY = "test-consumer-key"
    DISCOGS_CONSUMER_SECRET = "test-consumer-secret"
    DISCOGS_CALLBACK_URL = "http://localhost/api/v1/auth/discogs/callback"


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/prod/testing).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
