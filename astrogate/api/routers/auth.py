from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from astrogate.api.deps import (
    get_login_use_case,
    get_session_store,
    get_session_with_subscription_use_case,
    refresh_current_session,
)
from astrogate.api.schemas.auth import (
    LoginRequest,
    LogoutResponse,
    SessionResponse,
    SessionWithSubscriptionResponse,
)
from astrogate.application.dto.session import LoginInput
from astrogate.application.use_cases.get_session_with_subscription import (
    GetSessionWithSubscriptionUseCase,
)
from astrogate.application.use_cases.login import LoginUseCase
from astrogate.application.use_cases.session_store import SessionStore
from astrogate.domain.exceptions import InvalidCredentialsError


router = APIRouter()


@router.post("/api/auth/login", response_model=SessionResponse)
def login(
    req: LoginRequest,
    use_case: LoginUseCase = Depends(get_login_use_case),
):
    try:
        session = use_case.execute(LoginInput(username=req.username, password=req.password))
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return SessionResponse(
        user_id=session.user_id,
        username=session.username,
        expires_at=session.expires_at,
    )


@router.post("/api/auth/logout", response_model=LogoutResponse)
def logout(session_store: SessionStore = Depends(get_session_store)):
    session_store.destroy()
    return LogoutResponse(ok=True)


@router.get(
    "/api/auth/session",
    response_model=SessionWithSubscriptionResponse | None,
    dependencies=[Depends(refresh_current_session)],
)
def get_session(
    use_case: GetSessionWithSubscriptionUseCase = Depends(get_session_with_subscription_use_case),
):
    output = use_case.execute()
    if output is None:
        return None
    return SessionWithSubscriptionResponse(
        user_id=output.user_id,
        username=output.username,
        subscription_plan=output.subscription_plan,
        is_subscription_active=output.is_subscription_active,
        trial_days_left=output.trial_days_left,
    )
