"""
Environment-aware configuration.
Values come from the process environment, with .env loaded first if present.
"""
import os
import tempfile
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present

DEV_JWT_SECRET = "dev-secret-change-me"


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///session-auth.db")
    SQLALCHEMY_ECHO = _flag("SQLALCHEMY_ECHO")

    # Access tokens: signed, stateless, short-lived
    JWT_SECRET = os.getenv("JWT_SECRET", DEV_JWT_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "session-auth-api")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "60")))
    # Refresh tokens: stored as fingerprints, single use
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", "60")))
    # Off: a replayed refresh token is refused but its descendants stay valid
    REFRESH_REUSE_REVOKES_FAMILY = _flag("REFRESH_REUSE_REVOKES_FAMILY")

    ACCESS_COOKIE_NAME = "access_token"
    REFRESH_COOKIE_NAME = "refresh_token"
    COOKIE_SECURE = _flag("COOKIE_SECURE")
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Lax")


class DevelopmentConfig(BaseConfig):
    APP_ENV = "dev"
    DEBUG = True


class TestingConfig(BaseConfig):
    APP_ENV = "testing"
    TESTING = True
    # file-backed: every thread must see the same database
    DATABASE_URL = os.getenv(
        "TEST_DATABASE_URL",
        "sqlite:///" + os.path.join(tempfile.gettempdir(), "session-auth-test.db"),
    )
    JWT_SECRET = "testing-secret-with-enough-bytes-for-hs256"
    REFRESH_REUSE_REVOKES_FAMILY = False
    COOKIE_SECURE = False
    COOKIE_SAMESITE = "Lax"


class ProductionConfig(BaseConfig):
    APP_ENV = "production"
    DEBUG = False
    # Cross-site cookie transport needs Secure + SameSite=None
    COOKIE_SECURE = True
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "None")


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    if name:
        name = name.lower()
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
