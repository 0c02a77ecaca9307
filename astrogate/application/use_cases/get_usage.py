from __future__ import annotations

from datetime import datetime, timezone

from astrogate.application.dto.usage import AIUsageOutput, PlanLimitsOutput
from astrogate.application.ports.usage_port import UsagePort
from astrogate.application.use_cases.resolve_subscription import SubscriptionResolver
from astrogate.domain.entities.plan import ALL_CHART_TYPES
from astrogate.domain.services import entitlements
from astrogate.domain.services.plan_limits import PlanLimitTable


def usage_day(now: datetime | None = None) -> str:
    """AI quotas reset at midnight UTC."""
    return (now or datetime.now(timezone.utc)).strftime("%Y-%m-%d")


class GetAIUsageUseCase:
    def __init__(
        self,
        *,
        resolver: SubscriptionResolver,
        usage_port: UsagePort,
        limit_table: PlanLimitTable,
    ):
        self._resolver = resolver
        self._usage_port = usage_port
        self._limit_table = limit_table

    def execute(self, *, user_id: str, now: datetime | None = None) -> AIUsageOutput:
        status = self._resolver.resolve(user_id)
        used = self._usage_port.get_ai_generations(user_id=user_id, day=usage_day(now))
        limits = self._limit_table.limits_for(status.plan)
        return AIUsageOutput(
            plan=status.plan,
            usage=used,
            limit=limits.max_ai_generations_per_day,
            remaining=entitlements.remaining_ai_generations(status.plan, used, table=self._limit_table),
        )


class GetPlanLimitsUseCase:
    def __init__(
        self,
        *,
        resolver: SubscriptionResolver,
        usage_port: UsagePort,
        limit_table: PlanLimitTable,
    ):
        self._resolver = resolver
        self._usage_port = usage_port
        self._limit_table = limit_table

    def execute(self, *, user_id: str, now: datetime | None = None) -> PlanLimitsOutput:
        status = self._resolver.resolve(user_id)
        limits = self._limit_table.limits_for(status.plan)
        subjects = self._usage_port.count_subjects(user_id=user_id)
        generations = self._usage_port.get_ai_generations(user_id=user_id, day=usage_day(now))

        if limits.allowed_chart_types == "all":
            chart_types = list(ALL_CHART_TYPES)
        else:
            chart_types = [chart for chart in ALL_CHART_TYPES if chart in limits.allowed_chart_types]

        return PlanLimitsOutput(
            plan=status.plan,
            is_active=status.is_active,
            is_stale=status.is_stale,
            max_subjects=limits.max_subjects,
            allowed_chart_types=chart_types,
            max_ai_generations_per_day=limits.max_ai_generations_per_day,
            subjects_used=subjects,
            remaining_subjects=entitlements.remaining_subjects(status.plan, subjects, table=self._limit_table),
            ai_generations_today=generations,
            remaining_ai_generations=entitlements.remaining_ai_generations(
                status.plan,
                generations,
                table=self._limit_table,
            ),
        )
