from __future__ import annotations

from astrogate.api.schemas.base import ApiModel


class AIUsageResponse(ApiModel):
    plan: str
    usage: int
    limit: int
    remaining: int | None
