from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from astrogate.api.deps import (
    get_admin_login_use_case,
    get_admin_session_store,
    get_subscription_resolver,
    require_admin_session,
    require_superadmin_session,
)
from astrogate.api.schemas.admin import AdminLoginRequest, AdminSessionResponse
from astrogate.api.schemas.auth import LogoutResponse
from astrogate.api.schemas.subscription import SubscriptionStatusResponse
from astrogate.application.dto.session import AdminLoginInput
from astrogate.application.use_cases.login import AdminLoginUseCase
from astrogate.application.use_cases.resolve_subscription import SubscriptionResolver
from astrogate.application.use_cases.session_store import AdminSessionStore
from astrogate.domain.entities.session import AdminSessionPayload
from astrogate.domain.exceptions import InvalidCredentialsError


router = APIRouter(prefix="/admin/api")


def _session_response(session: AdminSessionPayload) -> AdminSessionResponse:
    return AdminSessionResponse(
        admin_id=session.admin_id,
        username=session.username,
        role=session.role,
        expires_at=session.expires_at,
    )


@router.post("/login", response_model=AdminSessionResponse)
def admin_login(
    req: AdminLoginRequest,
    x_forwarded_for: str | None = Header(default=None),
    use_case: AdminLoginUseCase = Depends(get_admin_login_use_case),
):
    try:
        session = use_case.execute(
            AdminLoginInput(username=req.username, password=req.password, ip=x_forwarded_for)
        )
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    return _session_response(session)


@router.post("/logout", response_model=LogoutResponse)
def admin_logout(session_store: AdminSessionStore = Depends(get_admin_session_store)):
    session_store.destroy()
    return LogoutResponse(ok=True)


@router.get("/session", response_model=AdminSessionResponse)
def admin_session(session: AdminSessionPayload = Depends(require_admin_session)):
    return _session_response(session)


@router.get("/users/{user_id}/subscription", response_model=SubscriptionStatusResponse)
def admin_user_subscription(
    user_id: str,
    force_sync: bool = Query(default=False, alias="forceSync"),
    _: AdminSessionPayload = Depends(require_superadmin_session),
    resolver: SubscriptionResolver = Depends(get_subscription_resolver),
):
    status = resolver.resolve(user_id, force_sync=force_sync)
    return SubscriptionStatusResponse(
        plan=status.plan,
        is_active=status.is_active,
        trial_days_left=status.trial_days_left,
        subscription_ends_at=status.subscription_ends_at,
        is_stale=status.is_stale,
    )
