from __future__ import annotations

import math
from datetime import datetime, timedelta

from astrogate.domain.entities.subscription import (
    SubscriptionStatus,
    normalize_plan,
    plan_grants_access,
)
from astrogate.domain.entities.user import User


SECONDS_PER_DAY = 24 * 60 * 60


def is_sync_stale(
    last_sync: datetime | None,
    *,
    now: datetime,
    stale_after: timedelta,
) -> bool:
    if last_sync is None:
        return True
    return now - last_sync > stale_after


def trial_days_left(trial_ends_at: datetime, *, now: datetime) -> int:
    seconds = (trial_ends_at - now).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


def build_subscription_status(user: User, *, now: datetime, is_stale: bool) -> SubscriptionStatus:
    plan = normalize_plan(user.subscription_plan)
    days_left: int | None = None

    if plan == "trial" and user.trial_ends_at is not None:
        days_left = trial_days_left(user.trial_ends_at, now=now)
        if days_left <= 0:
            plan = "free"
            days_left = 0

    return SubscriptionStatus(
        plan=plan,
        is_active=plan_grants_access(plan),
        trial_days_left=days_left,
        subscription_ends_at=user.subscription_ends_at,
        is_stale=is_stale,
    )


def should_downgrade_without_subscription(user: User) -> bool:
    """A sync that found nothing at the provider only downgrades plain accounts.

    Lifetime grants, trials and users already linked to the provider keep
    their cached plan.
    """
    has_provider_ids = bool(user.customer_id) or bool(user.subscription_id)
    return (
        normalize_plan(user.subscription_plan) != "lifetime"
        and user.trial_ends_at is None
        and not has_provider_ids
    )
