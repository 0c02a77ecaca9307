from __future__ import annotations

from astrogate.domain.entities.plan import UNLIMITED, Quota
from astrogate.domain.services.plan_limits import DEFAULT_PLAN_LIMITS, PlanLimitTable


def can_access_chart_type(
    plan: str | None,
    chart_type: str,
    *,
    table: PlanLimitTable = DEFAULT_PLAN_LIMITS,
) -> bool:
    allowed = table.limits_for(plan).allowed_chart_types
    if allowed == "all":
        return True
    return chart_type in allowed


def can_create_subject(
    plan: str | None,
    current_count: int,
    *,
    table: PlanLimitTable = DEFAULT_PLAN_LIMITS,
) -> bool:
    return current_count < table.limits_for(plan).max_subjects


def can_generate_ai(
    plan: str | None,
    total_generations_today: int,
    *,
    table: PlanLimitTable = DEFAULT_PLAN_LIMITS,
) -> bool:
    return total_generations_today < table.limits_for(plan).max_ai_generations_per_day


def remaining_subjects(
    plan: str | None,
    current_count: int,
    *,
    table: PlanLimitTable = DEFAULT_PLAN_LIMITS,
) -> Quota:
    return _remaining(table.limits_for(plan).max_subjects, current_count)


def remaining_ai_generations(
    plan: str | None,
    total_generations_today: int,
    *,
    table: PlanLimitTable = DEFAULT_PLAN_LIMITS,
) -> Quota:
    return _remaining(table.limits_for(plan).max_ai_generations_per_day, total_generations_today)


def _remaining(limit: Quota, used: int) -> Quota:
    if limit == UNLIMITED:
        return UNLIMITED
    return max(0, int(limit) - used)
