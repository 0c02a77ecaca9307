from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _list(name: str) -> list[str]:
    value = _env(name, "")
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    app_env: str
    session_secret: str | None
    admin_session_secret: str | None
    session_ttl_days: int
    admin_session_ttl_hours: int
    cookie_secure: bool
    billing_enabled: bool
    postgres_dsn: str
    stripe_secret_key: str
    stripe_webhook_secret: str
    stripe_price_id: str
    stripe_success_url: str
    stripe_cancel_url: str
    stripe_portal_return_url: str
    free_max_ai_daily: int
    pro_max_ai_daily: int
    subscription_stale_hours: int
    log_level: str
    cors_origins: list[str]

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def get_settings() -> Settings:
    app_env = (_env("APP_ENV", "development") or "development").strip().lower()
    return Settings(
        app_env=app_env,
        session_secret=_env("SESSION_SECRET") or None,
        admin_session_secret=_env("ADMIN_SESSION_SECRET") or None,
        session_ttl_days=int(_env("SESSION_TTL_DAYS", "7")),
        admin_session_ttl_hours=int(_env("ADMIN_SESSION_TTL_HOURS", "8")),
        cookie_secure=_bool("COOKIE_SECURE", app_env == "production"),
        billing_enabled=_bool("BILLING_ENABLED", False),
        postgres_dsn=_env("POSTGRES_DSN", ""),
        stripe_secret_key=_env("STRIPE_SECRET_KEY", ""),
        stripe_webhook_secret=_env("STRIPE_WEBHOOK_SECRET", ""),
        stripe_price_id=_env("STRIPE_PRICE_ID", ""),
        stripe_success_url=_env("STRIPE_SUCCESS_URL", ""),
        stripe_cancel_url=_env("STRIPE_CANCEL_URL", ""),
        stripe_portal_return_url=_env("STRIPE_PORTAL_RETURN_URL", ""),
        free_max_ai_daily=int(_env("FREE_MAX_AI_DAILY", "5")),
        pro_max_ai_daily=int(_env("PRO_MAX_AI_DAILY", "20")),
        subscription_stale_hours=int(_env("SUBSCRIPTION_STALE_HOURS", "24")),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
        cors_origins=_list("CORS_ORIGINS"),
    )
