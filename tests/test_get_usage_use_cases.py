from __future__ import annotations

from datetime import datetime, timezone

from astrogate.application.use_cases.get_usage import (
    GetAIUsageUseCase,
    GetPlanLimitsUseCase,
    usage_day,
)
from astrogate.domain.entities.plan import ALL_CHART_TYPES, UNLIMITED
from astrogate.domain.entities.subscription import SubscriptionStatus, free_status, lifetime_status
from astrogate.domain.services.plan_limits import PlanLimitTable


class FakeResolver:
    def __init__(self, status: SubscriptionStatus):
        self._status = status

    def resolve(self, user_id: str, *, force_sync: bool = False) -> SubscriptionStatus:
        return self._status


class FakeUsagePort:
    def __init__(self, *, subjects: int = 0, generations: dict[str, int] | None = None):
        self._subjects = subjects
        self._generations = generations or {}
        self.days: list[str] = []

    def count_subjects(self, *, user_id: str) -> int:
        return self._subjects

    def get_ai_generations(self, *, user_id: str, day: str) -> int:
        self.days.append(day)
        return self._generations.get(day, 0)


NOW = datetime(2026, 3, 14, 23, 59, tzinfo=timezone.utc)


def test_usage_day_is_utc_date():
    assert usage_day(NOW) == "2026-03-14"


def test_ai_usage_for_free_plan():
    usage_port = FakeUsagePort(generations={"2026-03-14": 3})
    use_case = GetAIUsageUseCase(
        resolver=FakeResolver(free_status()),
        usage_port=usage_port,
        limit_table=PlanLimitTable(),
    )

    output = use_case.execute(user_id="user-1", now=NOW)

    assert output.plan == "free"
    assert output.usage == 3
    assert output.limit == 5
    assert output.remaining == 2
    assert usage_port.days == ["2026-03-14"]


def test_ai_usage_remaining_is_clamped_at_zero():
    use_case = GetAIUsageUseCase(
        resolver=FakeResolver(free_status()),
        usage_port=FakeUsagePort(generations={"2026-03-14": 8}),
        limit_table=PlanLimitTable(),
    )

    assert use_case.execute(user_id="user-1", now=NOW).remaining == 0


def test_plan_limits_for_free_plan():
    use_case = GetPlanLimitsUseCase(
        resolver=FakeResolver(free_status(is_stale=True)),
        usage_port=FakeUsagePort(subjects=4, generations={"2026-03-14": 1}),
        limit_table=PlanLimitTable(),
    )

    output = use_case.execute(user_id="user-1", now=NOW)

    assert output.plan == "free"
    assert output.is_stale is True
    assert output.max_subjects == 5
    assert output.allowed_chart_types == ["natal"]
    assert output.subjects_used == 4
    assert output.remaining_subjects == 1
    assert output.ai_generations_today == 1
    assert output.remaining_ai_generations == 4


def test_plan_limits_for_lifetime_plan_are_unlimited():
    use_case = GetPlanLimitsUseCase(
        resolver=FakeResolver(lifetime_status()),
        usage_port=FakeUsagePort(subjects=40),
        limit_table=PlanLimitTable(),
    )

    output = use_case.execute(user_id="user-1", now=NOW)

    assert output.max_subjects == UNLIMITED
    assert output.remaining_subjects == UNLIMITED
    assert output.allowed_chart_types == list(ALL_CHART_TYPES)
    assert output.max_ai_generations_per_day == 20
