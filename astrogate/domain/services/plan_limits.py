from __future__ import annotations

from astrogate.domain.entities.plan import UNLIMITED, PlanLimits
from astrogate.domain.entities.subscription import SubscriptionPlan, normalize_plan


DEFAULT_FREE_MAX_AI_DAILY = 5
DEFAULT_PRO_MAX_AI_DAILY = 20
FREE_MAX_SUBJECTS = 5
FREE_CHART_TYPES: frozenset[str] = frozenset({"natal"})


class PlanLimitTable:
    """Static plan -> limits lookup.

    Every plan has exactly one row. Only ``free`` restricts chart types;
    ``trial``, ``pro`` and ``lifetime`` share the same limits. Unknown or
    missing plans resolve to the ``free`` row.
    """

    def __init__(
        self,
        *,
        free_max_ai_daily: int = DEFAULT_FREE_MAX_AI_DAILY,
        pro_max_ai_daily: int = DEFAULT_PRO_MAX_AI_DAILY,
    ):
        full_access = PlanLimits(
            max_subjects=UNLIMITED,
            allowed_chart_types="all",
            max_ai_generations_per_day=pro_max_ai_daily,
        )
        self._rows: dict[SubscriptionPlan, PlanLimits] = {
            "free": PlanLimits(
                max_subjects=FREE_MAX_SUBJECTS,
                allowed_chart_types=FREE_CHART_TYPES,
                max_ai_generations_per_day=free_max_ai_daily,
            ),
            "trial": full_access,
            "pro": full_access,
            "lifetime": full_access,
        }

    def limits_for(self, plan: str | None) -> PlanLimits:
        return self._rows[normalize_plan(plan)]


DEFAULT_PLAN_LIMITS = PlanLimitTable()
