from __future__ import annotations

from typing import Protocol

from astrogate.application.dto.billing import CheckoutSessionResult
from astrogate.domain.entities.subscription import SubscriptionStatus


class BillingProviderPort(Protocol):
    @property
    def is_available(self) -> bool:
        ...

    def get_user_subscription(self, user_id: str, *, force_sync: bool = False) -> SubscriptionStatus:
        ...

    def create_checkout_session(
        self,
        *,
        product_id: str,
        metadata: dict[str, str],
    ) -> CheckoutSessionResult:
        ...

    def get_customer_portal_url(self, *, customer_id: str) -> str | None:
        ...
