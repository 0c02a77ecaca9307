from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from astrogate.domain.entities.user import AdminUser, User


def _as_str(value: Any) -> str:
    return str(value)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        username=row["username"],
        email=row.get("email"),
        password_hash=row.get("password_hash"),
        onboarding_completed=bool(row["onboarding_completed"]),
        terms_accepted_version=row.get("terms_accepted_version"),
        privacy_accepted_version=row.get("privacy_accepted_version"),
        subscription_plan=row.get("subscription_plan") or "free",
        subscription_id=row.get("subscription_id"),
        customer_id=row.get("customer_id"),
        trial_ends_at=_as_utc(row.get("trial_ends_at")),
        subscription_ends_at=_as_utc(row.get("subscription_ends_at")),
        last_subscription_sync=_as_utc(row.get("last_subscription_sync")),
    )


def map_row_to_admin_user(row: Mapping[str, Any]) -> AdminUser:
    return AdminUser(
        id=_as_str(row["id"]),
        username=row["username"],
        password_hash=row["password_hash"],
        role="superadmin" if row["role"] == "superadmin" else "admin",
    )
