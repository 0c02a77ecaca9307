from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from astrogate.api.deps import (
    get_create_checkout_session_use_case,
    get_current_session,
    get_customer_portal_use_case,
    get_process_billing_webhook_use_case,
)
from astrogate.api.schemas.billing import (
    BillingWebhookResponse,
    CheckoutSessionResponse,
    CustomerPortalResponse,
)
from astrogate.application.dto.billing import BillingWebhookInput, CreateCheckoutSessionInput
from astrogate.application.use_cases.billing import (
    CreateCheckoutSessionUseCase,
    GetCustomerPortalUseCase,
    ProcessBillingWebhookUseCase,
)
from astrogate.domain.entities.session import SessionPayload
from astrogate.domain.exceptions import (
    BillingCustomerMissingError,
    BillingError,
    BillingUnavailableError,
    UserNotFoundError,
)


router = APIRouter()


@router.post("/api/billing/checkout", response_model=CheckoutSessionResponse)
def create_checkout_session(
    session: SessionPayload = Depends(get_current_session),
    use_case: CreateCheckoutSessionUseCase = Depends(get_create_checkout_session_use_case),
):
    try:
        output = use_case.execute(
            CreateCheckoutSessionInput(user_id=session.user_id, username=session.username)
        )
    except BillingUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except BillingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return CheckoutSessionResponse(checkout_url=output.checkout_url, session_id=output.session_id)


@router.post("/api/billing/portal", response_model=CustomerPortalResponse)
def create_customer_portal(
    session: SessionPayload = Depends(get_current_session),
    use_case: GetCustomerPortalUseCase = Depends(get_customer_portal_use_case),
):
    try:
        output = use_case.execute(user_id=session.user_id)
    except (UserNotFoundError, BillingCustomerMissingError) as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except BillingUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except BillingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return CustomerPortalResponse(url=output.url)


@router.post("/api/billing/webhook", response_model=BillingWebhookResponse)
async def billing_webhook(
    request: Request,
    stripe_signature: str = Header(..., alias="Stripe-Signature"),
    use_case: ProcessBillingWebhookUseCase = Depends(get_process_billing_webhook_use_case),
):
    payload = await request.body()
    try:
        output = use_case.execute(BillingWebhookInput(signature=stripe_signature, payload=payload))
    except BillingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return BillingWebhookResponse(event_type=output.event_type, handled=output.handled)
