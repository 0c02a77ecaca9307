from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from astrogate.application.dto.billing import CheckoutSessionResult
from astrogate.application.ports.billing_port import BillingProviderPort
from astrogate.application.ports.identity_port import IdentityPort
from astrogate.application.ports.payment_gateway_port import PaymentGatewayPort
from astrogate.domain.entities.subscription import SubscriptionStatus, free_status
from astrogate.domain.entities.user import User
from astrogate.domain.exceptions import BillingError
from astrogate.domain.services.subscription_status import (
    build_subscription_status,
    is_sync_stale,
    should_downgrade_without_subscription,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedBillingProviderSettings:
    stale_after: timedelta
    success_url: str
    cancel_url: str
    portal_return_url: str


class CachedBillingProvider(BillingProviderPort):
    """Billing provider backed by the subscription fields cached on the user row.

    Reads come from the cache and report ``is_stale`` once the last sync is
    older than ``stale_after``. ``force_sync`` refreshes the cache from the
    payment gateway before answering.
    """

    def __init__(
        self,
        *,
        identity_port: IdentityPort,
        payment_gateway: PaymentGatewayPort,
        settings: CachedBillingProviderSettings,
    ):
        self._identity_port = identity_port
        self._payment_gateway = payment_gateway
        self._settings = settings

    @property
    def is_available(self) -> bool:
        return True

    def get_user_subscription(self, user_id: str, *, force_sync: bool = False) -> SubscriptionStatus:
        user = self._identity_port.get_user_by_id(user_id=user_id)
        if user is None:
            logger.warning("Subscription requested for unknown user=%s", user_id)
            return free_status(is_active=False)

        now = _utcnow()
        is_stale = is_sync_stale(
            user.last_subscription_sync,
            now=now,
            stale_after=self._settings.stale_after,
        )

        if force_sync and (user.subscription_id or user.email):
            if not self.sync_subscription(user, now=now):
                return build_subscription_status(user, now=now, is_stale=True)
            refreshed = self._identity_port.get_user_by_id(user_id=user_id)
            if refreshed is not None:
                return build_subscription_status(refreshed, now=now, is_stale=False)

        return build_subscription_status(user, now=now, is_stale=is_stale)

    def sync_subscription(self, user: User, *, now: datetime) -> bool:
        """Pull the user's subscription from the gateway into the cache."""
        logger.info("Syncing subscription for user=%s", user.id)
        try:
            found = None
            if user.subscription_id:
                found = self._payment_gateway.get_subscription(subscription_id=user.subscription_id)
            if found is None and user.email:
                found = self._payment_gateway.get_active_subscription_by_email(email=user.email)
        except BillingError:
            logger.exception("Subscription sync failed for user=%s", user.id)
            return False

        if found is not None:
            self._identity_port.update_user_subscription(
                user_id=user.id,
                subscription_plan=found.plan,
                subscription_id=found.subscription_id,
                customer_id=found.customer_id or user.customer_id,
                trial_ends_at=found.trial_ends_at,
                subscription_ends_at=found.current_period_end,
                synced_at=now,
            )
            logger.info("Synced user=%s plan=%s", user.id, found.plan)
            return True

        downgrade = should_downgrade_without_subscription(user)
        self._identity_port.mark_subscription_synced(
            user_id=user.id,
            synced_at=now,
            subscription_plan="free" if downgrade else None,
        )
        if downgrade:
            logger.info("No subscription found for user=%s; downgraded to free", user.id)
        else:
            logger.info("No subscription found for user=%s; keeping plan=%s", user.id, user.subscription_plan)
        return True

    def create_checkout_session(self, *, product_id: str, metadata: dict[str, str]) -> CheckoutSessionResult:
        user = None
        user_id = metadata.get("user_id")
        if user_id:
            user = self._identity_port.get_user_by_id(user_id=user_id)

        return self._payment_gateway.create_checkout_session(
            price_id=product_id,
            success_url=self._settings.success_url,
            cancel_url=self._settings.cancel_url,
            metadata=metadata,
            customer_id=user.customer_id if user else None,
            customer_email=user.email if user else None,
        )

    def get_customer_portal_url(self, *, customer_id: str) -> str | None:
        return self._payment_gateway.get_customer_portal_url(
            customer_id=customer_id,
            return_url=self._settings.portal_return_url,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
