from __future__ import annotations

import logging

from astrogate.application.dto.billing import (
    BillingWebhookInput,
    BillingWebhookOutput,
    CreateCheckoutSessionInput,
    CreateCheckoutSessionOutput,
    CustomerPortalOutput,
)
from astrogate.application.ports.billing_port import BillingProviderPort
from astrogate.application.ports.identity_port import IdentityPort
from astrogate.application.ports.payment_gateway_port import PaymentGatewayPort
from astrogate.application.use_cases.session_store import utcnow
from astrogate.domain.exceptions import (
    BillingCustomerMissingError,
    BillingError,
    BillingUnavailableError,
    UserNotFoundError,
)


logger = logging.getLogger(__name__)

SUBSCRIPTION_EVENTS = {
    "customer.subscription.created",
    "customer.subscription.updated",
    "customer.subscription.deleted",
}


class CreateCheckoutSessionUseCase:
    def __init__(self, *, billing_provider: BillingProviderPort, product_id: str):
        self._billing_provider = billing_provider
        self._product_id = product_id

    def execute(self, command: CreateCheckoutSessionInput) -> CreateCheckoutSessionOutput:
        if not self._billing_provider.is_available:
            raise BillingUnavailableError("Billing is not configured.")
        if not self._product_id:
            raise BillingUnavailableError("No product configured for checkout.")

        result = self._billing_provider.create_checkout_session(
            product_id=self._product_id,
            metadata={"user_id": command.user_id, "username": command.username},
        )
        logger.info("Checkout session created; user=%s session=%s", command.user_id, result.session_id)
        return CreateCheckoutSessionOutput(session_id=result.session_id, checkout_url=result.checkout_url)


class GetCustomerPortalUseCase:
    def __init__(self, *, identity_port: IdentityPort, billing_provider: BillingProviderPort):
        self._identity_port = identity_port
        self._billing_provider = billing_provider

    def execute(self, *, user_id: str) -> CustomerPortalOutput:
        if not self._billing_provider.is_available:
            raise BillingUnavailableError("Billing is not configured.")

        user = self._identity_port.get_user_by_id(user_id=user_id)
        if user is None:
            raise UserNotFoundError("User not found.")
        if not user.customer_id:
            logger.warning("No billing customer for user=%s", user_id)
            raise BillingCustomerMissingError("No subscription found.")

        url = self._billing_provider.get_customer_portal_url(customer_id=user.customer_id)
        if not url:
            raise BillingError("Failed to create portal session.")
        return CustomerPortalOutput(url=url)


class ProcessBillingWebhookUseCase:
    def __init__(self, *, identity_port: IdentityPort, payment_gateway: PaymentGatewayPort):
        self._identity_port = identity_port
        self._payment_gateway = payment_gateway

    def execute(self, command: BillingWebhookInput) -> BillingWebhookOutput:
        event = self._payment_gateway.verify_webhook(signature=command.signature, payload=command.payload)

        if event.event_type == "checkout.session.completed" and event.checkout_completed is not None:
            completed = event.checkout_completed
            if completed.user_id and completed.customer_id:
                self._identity_port.update_user_customer_id(
                    user_id=completed.user_id,
                    customer_id=completed.customer_id,
                    synced_at=utcnow(),
                )
                logger.info("Linked customer=%s to user=%s", completed.customer_id, completed.user_id)
            return BillingWebhookOutput(event_type=event.event_type, handled=True)

        if event.event_type in SUBSCRIPTION_EVENTS:
            subscription = event.subscription
            if subscription is None:
                raise BillingError("Subscription event missing payload.")

            user = None
            if subscription.customer_id:
                user = self._identity_port.get_user_by_customer_id(customer_id=subscription.customer_id)
            if user is None:
                user = self._identity_port.get_user_by_subscription_id(
                    subscription_id=subscription.subscription_id
                )
            if user is None:
                logger.error(
                    "No user linked to customer=%s subscription=%s; event=%s ignored",
                    subscription.customer_id,
                    subscription.subscription_id,
                    event.event_type,
                )
                return BillingWebhookOutput(event_type=event.event_type, handled=False)

            plan = "free" if event.event_type == "customer.subscription.deleted" else subscription.plan
            self._identity_port.update_user_subscription(
                user_id=user.id,
                subscription_plan=plan,
                subscription_id=subscription.subscription_id,
                customer_id=subscription.customer_id or user.customer_id,
                trial_ends_at=subscription.trial_ends_at,
                subscription_ends_at=subscription.current_period_end,
                synced_at=utcnow(),
            )
            logger.info("Subscription updated from webhook; user=%s plan=%s", user.id, plan)
            return BillingWebhookOutput(event_type=event.event_type, handled=True)

        return BillingWebhookOutput(event_type=event.event_type, handled=False)
