"""Environment-driven settings.

A ``.env`` file in the working directory is loaded first (python-dotenv);
real environment variables always win over it.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("invalid_integer_setting", name=name, value=raw, fallback=default)
        return default


@dataclass(frozen=True)
class Settings:
    env: str = "development"

    # Bearer tokens
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24 * 7

    # Payment gateway
    payment_gateway: str = "fake"
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    currency: str = "INR"

    # Email
    email_backend: str = "fake"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    email_from: str = "Pizza Delivery <noreply@pizzadelivery.com>"

    # Admin / seeding
    admin_email: str = "admin@pizzadelivery.com"
    admin_password: str = "admin123"

    # HTTP
    frontend_url: str = "http://localhost:3000"
    cors_origins: list[str] = field(default_factory=list)

    # Rate limiting (sensitive auth operations)
    rate_limit_attempts: int = 5
    rate_limit_window_seconds: int = 15 * 60
    rate_limit_sweep_seconds: int = 15 * 60

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        frontend_url = os.getenv("FRONTEND_URL", cls.frontend_url)
        return cls(
            env=(os.getenv("PROTEAN_ENV") or "development").lower(),
            jwt_secret=os.getenv("JWT_SECRET", cls.jwt_secret),
            jwt_expires_minutes=_int("JWT_EXPIRES_MINUTES", cls.jwt_expires_minutes),
            payment_gateway=os.getenv("PAYMENT_GATEWAY", cls.payment_gateway).lower(),
            razorpay_key_id=os.getenv("RAZORPAY_KEY_ID", ""),
            razorpay_key_secret=os.getenv("RAZORPAY_KEY_SECRET", ""),
            currency=os.getenv("CURRENCY", cls.currency),
            email_backend=os.getenv("EMAIL_BACKEND", cls.email_backend).lower(),
            smtp_host=os.getenv("SMTP_HOST", cls.smtp_host),
            smtp_port=_int("SMTP_PORT", cls.smtp_port),
            smtp_user=os.getenv("SMTP_USER", ""),
            smtp_password=os.getenv("SMTP_PASSWORD", ""),
            email_from=os.getenv("EMAIL_FROM", cls.email_from),
            admin_email=os.getenv("ADMIN_EMAIL", cls.admin_email),
            admin_password=os.getenv("ADMIN_PASSWORD", cls.admin_password),
            frontend_url=frontend_url,
            cors_origins=[frontend_url, "http://localhost:5173"],
            rate_limit_attempts=_int("RATE_LIMIT_ATTEMPTS", cls.rate_limit_attempts),
            rate_limit_window_seconds=_int("RATE_LIMIT_WINDOW_SECONDS", cls.rate_limit_window_seconds),
            rate_limit_sweep_seconds=_int("RATE_LIMIT_SWEEP_SECONDS", cls.rate_limit_sweep_seconds),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path, override=False)
        logger.info("environment_loaded", path=str(env_path))
    return Settings.from_env()


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
