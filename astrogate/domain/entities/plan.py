from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Union


ChartType = Literal[
    "natal",
    "transits",
    "synastry",
    "composite",
    "solar-return",
    "lunar-return",
    "timeline",
]

ALL_CHART_TYPES: tuple[str, ...] = (
    "natal",
    "transits",
    "synastry",
    "composite",
    "solar-return",
    "lunar-return",
    "timeline",
)

UNLIMITED = math.inf

AllChartTypes = Literal["all"]

Quota = Union[int, float]


@dataclass(frozen=True)
class PlanLimits:
    max_subjects: Quota
    allowed_chart_types: frozenset[str] | AllChartTypes
    max_ai_generations_per_day: int

    @property
    def has_unlimited_subjects(self) -> bool:
        return self.max_subjects == UNLIMITED
