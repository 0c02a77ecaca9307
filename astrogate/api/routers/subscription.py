from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from astrogate.api.deps import (
    get_current_session,
    get_plan_limits_use_case,
    get_subscription_resolver,
    refresh_current_session,
)
from astrogate.api.schemas.base import quota_or_none
from astrogate.api.schemas.subscription import PlanLimitsResponse, SubscriptionStatusResponse
from astrogate.application.use_cases.get_usage import GetPlanLimitsUseCase
from astrogate.application.use_cases.resolve_subscription import SubscriptionResolver
from astrogate.domain.entities.session import SessionPayload


router = APIRouter(dependencies=[Depends(refresh_current_session)])


@router.get("/api/subscription/status", response_model=SubscriptionStatusResponse)
def get_subscription_status(
    force_sync: bool = Query(default=False, alias="forceSync"),
    session: SessionPayload = Depends(get_current_session),
    resolver: SubscriptionResolver = Depends(get_subscription_resolver),
):
    status = resolver.resolve(session.user_id, force_sync=force_sync)
    return SubscriptionStatusResponse(
        plan=status.plan,
        is_active=status.is_active,
        trial_days_left=status.trial_days_left,
        subscription_ends_at=status.subscription_ends_at,
        is_stale=status.is_stale,
    )


@router.get("/api/subscription/limits", response_model=PlanLimitsResponse)
def get_plan_limits(
    session: SessionPayload = Depends(get_current_session),
    use_case: GetPlanLimitsUseCase = Depends(get_plan_limits_use_case),
):
    output = use_case.execute(user_id=session.user_id)
    return PlanLimitsResponse(
        plan=output.plan,
        is_active=output.is_active,
        is_stale=output.is_stale,
        max_subjects=quota_or_none(output.max_subjects),
        allowed_chart_types=output.allowed_chart_types,
        max_ai_generations_per_day=output.max_ai_generations_per_day,
        subjects_used=output.subjects_used,
        remaining_subjects=quota_or_none(output.remaining_subjects),
        ai_generations_today=output.ai_generations_today,
        remaining_ai_generations=quota_or_none(output.remaining_ai_generations),
    )
