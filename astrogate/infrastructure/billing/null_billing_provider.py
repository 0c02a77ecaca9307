from __future__ import annotations

from astrogate.application.dto.billing import CheckoutSessionResult
from astrogate.application.ports.billing_port import BillingProviderPort
from astrogate.domain.entities.subscription import SubscriptionStatus
from astrogate.domain.exceptions import BillingUnavailableError


class NullBillingProvider(BillingProviderPort):
    """Selected when the deployment has no payment gateway configured."""

    @property
    def is_available(self) -> bool:
        return False

    def get_user_subscription(self, user_id: str, *, force_sync: bool = False) -> SubscriptionStatus:
        raise BillingUnavailableError("Billing provider is not configured.")

    def create_checkout_session(self, *, product_id: str, metadata: dict[str, str]) -> CheckoutSessionResult:
        raise BillingUnavailableError("Billing provider is not configured.")

    def get_customer_portal_url(self, *, customer_id: str) -> str | None:
        return None
