from __future__ import annotations

import logging

from astrogate.application.ports.billing_port import BillingProviderPort
from astrogate.domain.entities.subscription import SubscriptionStatus, free_status, lifetime_status
from astrogate.domain.exceptions import BillingError


logger = logging.getLogger(__name__)


class SubscriptionResolver:
    """Resolve the effective subscription status of a user.

    Resolution order, first match wins:

    1. billing disabled for the deployment: everyone gets ``lifetime``;
    2. no billing provider configured: ``lifetime``, logged as a degraded
       fallback so it can be told apart from a paying lifetime user;
    3. the provider's status, returned unchanged (``force_sync`` is passed
       through so the provider skips its cache);
    4. provider failure: fail closed to ``free``, inactive and stale.

    Errors that are not ``BillingError`` (identity store outages) propagate.
    """

    def __init__(self, *, billing_provider: BillingProviderPort, billing_enabled: bool):
        self._billing_provider = billing_provider
        self._billing_enabled = billing_enabled

    def resolve(self, user_id: str, *, force_sync: bool = False) -> SubscriptionStatus:
        if not self._billing_enabled:
            logger.debug("Billing disabled; user=%s resolution=lifetime", user_id)
            return lifetime_status()

        if not self._billing_provider.is_available:
            logger.warning(
                "Billing provider unavailable; user=%s resolution=degraded-lifetime",
                user_id,
            )
            return lifetime_status()

        try:
            status = self._billing_provider.get_user_subscription(user_id, force_sync=force_sync)
        except BillingError:
            logger.exception("Billing lookup failed; user=%s resolution=fallback-free", user_id)
            return free_status(is_active=False, is_stale=True)

        logger.info(
            "Subscription resolved; user=%s plan=%s active=%s stale=%s force_sync=%s",
            user_id,
            status.plan,
            status.is_active,
            status.is_stale,
            force_sync,
        )
        return status
