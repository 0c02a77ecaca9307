from __future__ import annotations

from fastapi import APIRouter, Depends

from astrogate.api.deps import get_ai_usage_use_case, get_current_session, refresh_current_session
from astrogate.api.schemas.ai import AIUsageResponse
from astrogate.api.schemas.base import quota_or_none
from astrogate.application.use_cases.get_usage import GetAIUsageUseCase
from astrogate.domain.entities.session import SessionPayload


router = APIRouter(dependencies=[Depends(refresh_current_session)])


@router.get("/api/ai/usage", response_model=AIUsageResponse)
def get_ai_usage(
    session: SessionPayload = Depends(get_current_session),
    use_case: GetAIUsageUseCase = Depends(get_ai_usage_use_case),
):
    output = use_case.execute(user_id=session.user_id)
    return AIUsageResponse(
        plan=output.plan,
        usage=output.usage,
        limit=output.limit,
        remaining=quota_or_none(output.remaining),
    )
