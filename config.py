# config.py
import os


def _getenv(key: str, default: str | None = None) -> str | None:
    """Small wrapper to read environment variables."""
    val = os.getenv(key)
    return val if (val is not None and val != "") else default


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _as_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    return int(value)


def _normalize_db_url(db_url: str) -> str:
    # Render/Heroku sometimes provide "postgres://"; SQLAlchemy wants "postgresql://"
    if db_url.startswith("postgres://"):
        return db_url.replace("postgres://", "postgresql://", 1)
    return db_url


class BaseConfig:
    # -------------------
    # Core / Flask
    # -------------------
    ENV = _getenv("FLASK_ENV", "development")
    DEBUG = _as_bool(_getenv("FLASK_DEBUG"), default=(ENV != "production"))
    TESTING = _as_bool(_getenv("FLASK_TESTING"), default=False)

    SECRET_KEY = _getenv("SECRET_KEY", "dev-secret-key")
    LOG_LEVEL = _getenv("LOG_LEVEL", "INFO")

    # JSON API only; forms are validated without CSRF tokens
    WTF_CSRF_ENABLED = False

    # -------------------
    # Identity provider
    # -------------------
    # The upstream auth gateway has already verified the caller and forwards these.
    AUTH_USER_ID_HEADER = _getenv("AUTH_USER_ID_HEADER", "X-User-Id")
    AUTH_USER_EMAIL_HEADER = _getenv("AUTH_USER_EMAIL_HEADER", "X-User-Email")

    # -------------------
    # Database
    # -------------------
    _db_url = _getenv("DATABASE_URL", "sqlite:///instance/app.db")
    SQLALCHEMY_DATABASE_URI = _normalize_db_url(_db_url)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
    }

    # -------------------
    # Paystack
    # -------------------
    PAYSTACK_SECRET_KEY = _getenv("PAYSTACK_SECRET_KEY", "")
    PAYSTACK_PUBLIC_KEY = _getenv("PAYSTACK_PUBLIC_KEY", "")
    PAYSTACK_BASE_URL = _getenv("PAYSTACK_BASE_URL", "https://api.paystack.co")
    PAYSTACK_TIMEOUT = _as_int(_getenv("PAYSTACK_TIMEOUT"), default=15)
    CURRENCY = _getenv("CURRENCY", "NGN")

    # -------------------
    # Trial
    # -------------------
    TRIAL_DAYS = _as_int(_getenv("TRIAL_DAYS"), default=7)
    TRIAL_ACCESS_TIER = _getenv("TRIAL_ACCESS_TIER", "Weekly")

    # -------------------
    # Referrals / Withdrawals (naira)
    # -------------------
    REFERRAL_COMMISSION_PERCENT = _getenv("REFERRAL_COMMISSION_PERCENT", "0.10")
    WITHDRAW_FEE_PERCENT = _getenv("WITHDRAW_FEE_PERCENT", "0.15")
    MIN_WITHDRAWAL_AMOUNT = _getenv("MIN_WITHDRAWAL_AMOUNT", "3000")


class DevelopmentConfig(BaseConfig):
    ENV = "development"
    DEBUG = True
    LOG_LEVEL = _getenv("LOG_LEVEL", "DEBUG")


class ProductionConfig(BaseConfig):
    ENV = "production"
    DEBUG = False

    SESSION_COOKIE_SECURE = True


class TestingConfig(BaseConfig):
    ENV = "testing"
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    PAYSTACK_SECRET_KEY = "sk_test_secret"
    PAYSTACK_PUBLIC_KEY = "pk_test_public"
    LOG_LEVEL = "WARNING"
