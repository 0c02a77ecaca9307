from __future__ import annotations

from dataclasses import dataclass

from astrogate.domain.entities.plan import Quota


@dataclass(frozen=True)
class AIUsageOutput:
    plan: str
    usage: int
    limit: int
    remaining: Quota


@dataclass(frozen=True)
class PlanLimitsOutput:
    plan: str
    is_active: bool
    is_stale: bool
    max_subjects: Quota
    allowed_chart_types: list[str]
    max_ai_generations_per_day: int
    subjects_used: int
    remaining_subjects: Quota
    ai_generations_today: int
    remaining_ai_generations: Quota
