from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


SubscriptionPlan = Literal["free", "trial", "pro", "lifetime"]

SUBSCRIPTION_PLANS: tuple[str, ...] = ("free", "trial", "pro", "lifetime")


@dataclass(frozen=True)
class SubscriptionStatus:
    plan: SubscriptionPlan
    is_active: bool
    trial_days_left: int | None
    subscription_ends_at: datetime | None
    is_stale: bool


def normalize_plan(plan: str | None) -> SubscriptionPlan:
    if not plan or plan not in SUBSCRIPTION_PLANS:
        return "free"
    return plan  # type: ignore[return-value]


def plan_grants_access(plan: str) -> bool:
    return plan in {"trial", "pro", "lifetime"}


def map_provider_status_to_plan(status: str | None) -> SubscriptionPlan:
    if status == "active":
        return "pro"
    if status == "trialing":
        return "trial"
    return "free"


def lifetime_status() -> SubscriptionStatus:
    return SubscriptionStatus(
        plan="lifetime",
        is_active=True,
        trial_days_left=None,
        subscription_ends_at=None,
        is_stale=False,
    )


def free_status(*, is_active: bool = False, is_stale: bool = False) -> SubscriptionStatus:
    return SubscriptionStatus(
        plan="free",
        is_active=is_active,
        trial_days_left=None,
        subscription_ends_at=None,
        is_stale=is_stale,
    )
