from __future__ import annotations

from typing import Protocol

from astrogate.application.dto.billing import (
    BillingWebhookEvent,
    CheckoutSessionResult,
    ProviderSubscription,
)


class PaymentGatewayPort(Protocol):
    def get_subscription(self, *, subscription_id: str) -> ProviderSubscription | None:
        ...

    def get_active_subscription_by_email(self, *, email: str) -> ProviderSubscription | None:
        ...

    def create_checkout_session(
        self,
        *,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        customer_id: str | None,
        customer_email: str | None,
    ) -> CheckoutSessionResult:
        ...

    def get_customer_portal_url(self, *, customer_id: str, return_url: str) -> str | None:
        ...

    def verify_webhook(self, *, signature: str, payload: bytes) -> BillingWebhookEvent:
        ...
