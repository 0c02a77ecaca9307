from __future__ import annotations

from datetime import datetime

from astrogate.api.schemas.base import ApiModel


class SubscriptionStatusResponse(ApiModel):
    plan: str
    is_active: bool
    trial_days_left: int | None = None
    subscription_ends_at: datetime | None = None
    is_stale: bool


class PlanLimitsResponse(ApiModel):
    plan: str
    is_active: bool
    is_stale: bool
    max_subjects: int | None
    allowed_chart_types: list[str]
    max_ai_generations_per_day: int
    subjects_used: int
    remaining_subjects: int | None
    ai_generations_today: int
    remaining_ai_generations: int | None
