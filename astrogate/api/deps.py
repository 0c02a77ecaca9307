from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, Response

from astrogate.application.ports.billing_port import BillingProviderPort
from astrogate.application.ports.cookie_port import CookieStorePort
from astrogate.application.use_cases.billing import (
    CreateCheckoutSessionUseCase,
    GetCustomerPortalUseCase,
    ProcessBillingWebhookUseCase,
)
from astrogate.application.use_cases.get_session_with_subscription import (
    GetSessionWithSubscriptionUseCase,
)
from astrogate.application.use_cases.get_usage import GetAIUsageUseCase, GetPlanLimitsUseCase
from astrogate.application.use_cases.login import AdminLoginUseCase, LoginUseCase
from astrogate.application.use_cases.resolve_subscription import SubscriptionResolver
from astrogate.application.use_cases.session_store import (
    AdminSessionStore,
    SessionStore,
    admin_cookie_policy,
    user_cookie_policy,
)
from astrogate.domain.entities.plan import ChartType
from astrogate.domain.entities.session import AdminSessionPayload, SessionPayload
from astrogate.domain.exceptions import AdminForbiddenError, EntitlementDeniedError
from astrogate.domain.services.entitlements import can_access_chart_type
from astrogate.domain.services.plan_limits import PlanLimitTable
from astrogate.infrastructure.billing.cached_billing_provider import (
    CachedBillingProvider,
    CachedBillingProviderSettings,
)
from astrogate.infrastructure.billing.null_billing_provider import NullBillingProvider
from astrogate.infrastructure.clients.stripe_client import StripeClient
from astrogate.infrastructure.db.engine import get_engine
from astrogate.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from astrogate.infrastructure.http.cookie_store import ResponseCookieStore
from astrogate.infrastructure.security.password_hasher import PasswordHasher
from astrogate.infrastructure.security.token_service import (
    ADMIN_SESSION_FALLBACK_SECRET,
    SESSION_FALLBACK_SECRET,
    AdminSessionTokenService,
    SessionTokenService,
    build_signing_config,
)
from astrogate.shared.config import get_settings


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn)


def _get_accounts_repository() -> SqlAccountsRepository:
    return SqlAccountsRepository(_get_db_engine())


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def get_session_token_service() -> SessionTokenService:
    settings = get_settings()
    signing = build_signing_config(
        env_name="SESSION_SECRET",
        secret=settings.session_secret,
        fallback_secret=SESSION_FALLBACK_SECRET,
        production=settings.is_production,
    )
    return SessionTokenService(signing=signing, ttl=timedelta(days=settings.session_ttl_days))


@lru_cache(maxsize=1)
def get_admin_session_token_service() -> AdminSessionTokenService:
    settings = get_settings()
    signing = build_signing_config(
        env_name="ADMIN_SESSION_SECRET",
        secret=settings.admin_session_secret,
        fallback_secret=ADMIN_SESSION_FALLBACK_SECRET,
        production=settings.is_production,
    )
    return AdminSessionTokenService(
        signing=signing,
        ttl=timedelta(hours=settings.admin_session_ttl_hours),
    )


@lru_cache(maxsize=1)
def _get_stripe_client() -> StripeClient | None:
    settings = get_settings()
    if not settings.stripe_secret_key:
        return None
    return StripeClient(
        secret_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
    )


@lru_cache(maxsize=1)
def get_plan_limit_table() -> PlanLimitTable:
    settings = get_settings()
    return PlanLimitTable(
        free_max_ai_daily=settings.free_max_ai_daily,
        pro_max_ai_daily=settings.pro_max_ai_daily,
    )


def get_billing_provider() -> BillingProviderPort:
    settings = get_settings()
    stripe_client = _get_stripe_client()
    if not settings.billing_enabled or stripe_client is None or not settings.postgres_dsn:
        return NullBillingProvider()
    return CachedBillingProvider(
        identity_port=_get_accounts_repository(),
        payment_gateway=stripe_client,
        settings=CachedBillingProviderSettings(
            stale_after=timedelta(hours=settings.subscription_stale_hours),
            success_url=settings.stripe_success_url,
            cancel_url=settings.stripe_cancel_url,
            portal_return_url=settings.stripe_portal_return_url,
        ),
    )


def get_subscription_resolver(
    billing_provider: BillingProviderPort = Depends(get_billing_provider),
) -> SubscriptionResolver:
    return SubscriptionResolver(
        billing_provider=billing_provider,
        billing_enabled=get_settings().billing_enabled,
    )


def get_cookie_store(request: Request, response: Response) -> CookieStorePort:
    return ResponseCookieStore(request, response)


def get_session_store(
    cookies: CookieStorePort = Depends(get_cookie_store),
    codec: SessionTokenService = Depends(get_session_token_service),
) -> SessionStore:
    settings = get_settings()
    return SessionStore(
        cookies=cookies,
        codec=codec,
        policy=user_cookie_policy(secure=settings.cookie_secure, ttl_days=settings.session_ttl_days),
    )


def get_admin_session_store(
    cookies: CookieStorePort = Depends(get_cookie_store),
    codec: AdminSessionTokenService = Depends(get_admin_session_token_service),
) -> AdminSessionStore:
    settings = get_settings()
    return AdminSessionStore(
        cookies=cookies,
        codec=codec,
        policy=admin_cookie_policy(
            secure=settings.cookie_secure,
            ttl_hours=settings.admin_session_ttl_hours,
        ),
    )


def get_login_use_case(
    session_store: SessionStore = Depends(get_session_store),
) -> LoginUseCase:
    return LoginUseCase(
        identity_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
        session_store=session_store,
    )


def get_admin_login_use_case(
    session_store: AdminSessionStore = Depends(get_admin_session_store),
) -> AdminLoginUseCase:
    return AdminLoginUseCase(
        admin_identity_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
        session_store=session_store,
    )


def get_session_with_subscription_use_case(
    session_store: SessionStore = Depends(get_session_store),
    resolver: SubscriptionResolver = Depends(get_subscription_resolver),
) -> GetSessionWithSubscriptionUseCase:
    return GetSessionWithSubscriptionUseCase(session_store=session_store, resolver=resolver)


def get_ai_usage_use_case(
    resolver: SubscriptionResolver = Depends(get_subscription_resolver),
    limit_table: PlanLimitTable = Depends(get_plan_limit_table),
) -> GetAIUsageUseCase:
    return GetAIUsageUseCase(
        resolver=resolver,
        usage_port=_get_accounts_repository(),
        limit_table=limit_table,
    )


def get_plan_limits_use_case(
    resolver: SubscriptionResolver = Depends(get_subscription_resolver),
    limit_table: PlanLimitTable = Depends(get_plan_limit_table),
) -> GetPlanLimitsUseCase:
    return GetPlanLimitsUseCase(
        resolver=resolver,
        usage_port=_get_accounts_repository(),
        limit_table=limit_table,
    )


def get_create_checkout_session_use_case(
    billing_provider: BillingProviderPort = Depends(get_billing_provider),
) -> CreateCheckoutSessionUseCase:
    return CreateCheckoutSessionUseCase(
        billing_provider=billing_provider,
        product_id=get_settings().stripe_price_id,
    )


def get_customer_portal_use_case(
    billing_provider: BillingProviderPort = Depends(get_billing_provider),
) -> GetCustomerPortalUseCase:
    return GetCustomerPortalUseCase(
        identity_port=_get_accounts_repository(),
        billing_provider=billing_provider,
    )


def get_process_billing_webhook_use_case() -> ProcessBillingWebhookUseCase:
    settings = get_settings()
    stripe_client = _get_stripe_client()
    if stripe_client is None or not settings.stripe_webhook_secret:
        raise HTTPException(status_code=503, detail="Billing is not configured.")
    return ProcessBillingWebhookUseCase(
        identity_port=_get_accounts_repository(),
        payment_gateway=stripe_client,
    )


def get_current_session(
    session_store: SessionStore = Depends(get_session_store),
) -> SessionPayload:
    session = session_store.read()
    if session is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session


def refresh_current_session(
    session_store: SessionStore = Depends(get_session_store),
) -> SessionPayload | None:
    """Slide the session cookie forward on every call to a protected router."""
    return session_store.refresh()


def require_admin_session(
    session_store: AdminSessionStore = Depends(get_admin_session_store),
) -> AdminSessionPayload:
    session = session_store.read()
    if session is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session


def require_superadmin_session(
    session: AdminSessionPayload = Depends(require_admin_session),
) -> AdminSessionPayload:
    if not session.is_superadmin:
        raise HTTPException(
            status_code=403,
            detail=str(AdminForbiddenError("Superadmin role is required.")),
        )
    return session


def require_chart_type(chart_type: ChartType):
    def _dependency(
        session: SessionPayload = Depends(get_current_session),
        resolver: SubscriptionResolver = Depends(get_subscription_resolver),
        limit_table: PlanLimitTable = Depends(get_plan_limit_table),
    ) -> SessionPayload:
        status = resolver.resolve(session.user_id)
        if not can_access_chart_type(status.plan, chart_type, table=limit_table):
            raise HTTPException(
                status_code=403,
                detail=str(EntitlementDeniedError(f"Chart type '{chart_type}' requires an upgrade.")),
            )
        return session

    return _dependency
