from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from astrogate.domain.entities.session import AdminRole


@dataclass(frozen=True)
class User:
    id: str
    username: str
    email: str | None
    password_hash: str | None
    onboarding_completed: bool
    terms_accepted_version: str | None
    privacy_accepted_version: str | None
    subscription_plan: str
    subscription_id: str | None
    customer_id: str | None
    trial_ends_at: datetime | None
    subscription_ends_at: datetime | None
    last_subscription_sync: datetime | None


@dataclass(frozen=True)
class AdminUser:
    id: str
    username: str
    password_hash: str
    role: AdminRole
