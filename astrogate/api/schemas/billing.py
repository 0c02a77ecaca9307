from __future__ import annotations

from astrogate.api.schemas.base import ApiModel


class CheckoutSessionResponse(ApiModel):
    checkout_url: str
    session_id: str


class CustomerPortalResponse(ApiModel):
    url: str


class BillingWebhookResponse(ApiModel):
    event_type: str
    handled: bool
