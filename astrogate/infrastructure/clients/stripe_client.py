from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import stripe

from astrogate.application.dto.billing import (
    BillingWebhookEvent,
    CheckoutCompletedEventData,
    CheckoutSessionResult,
    ProviderSubscription,
)
from astrogate.application.ports.payment_gateway_port import PaymentGatewayPort
from astrogate.domain.entities.subscription import map_provider_status_to_plan
from astrogate.domain.exceptions import BillingError


logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("active", "trialing")


class StripeClient(PaymentGatewayPort):
    def __init__(self, *, secret_key: str, webhook_secret: str):
        stripe.api_key = secret_key
        self._webhook_secret = webhook_secret

    def get_subscription(self, *, subscription_id: str) -> ProviderSubscription | None:
        try:
            subscription = stripe.Subscription.retrieve(subscription_id)
        except stripe.InvalidRequestError:
            logger.info("Stripe subscription %s not found", subscription_id)
            return None
        except Exception as exc:  # pragma: no cover - external API
            raise BillingError("Failed to retrieve Stripe subscription.") from exc
        return _map_subscription(_as_dict(subscription))

    def get_active_subscription_by_email(self, *, email: str) -> ProviderSubscription | None:
        try:
            customers = stripe.Customer.list(email=email, limit=1)
            customer_rows = getattr(customers, "data", [])
            if not customer_rows:
                return None
            customer_id = _as_dict(customer_rows[0]).get("id")
            subscriptions = stripe.Subscription.list(customer=customer_id, status="all", limit=10)
        except Exception as exc:  # pragma: no cover - external API
            raise BillingError("Failed to look up Stripe subscriptions by email.") from exc

        for row in getattr(subscriptions, "data", []):
            data = _as_dict(row)
            if data.get("status") in ACTIVE_STATUSES:
                return _map_subscription(data)
        return None

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
        payload: dict = {
            "mode": "subscription",
            "line_items": [{"price": price_id, "quantity": 1}],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        }
        if metadata.get("user_id"):
            payload["client_reference_id"] = metadata["user_id"]
        if customer_id:
            payload["customer"] = customer_id
        elif customer_email:
            payload["customer_email"] = customer_email

        try:
            session = stripe.checkout.Session.create(**payload)
        except Exception as exc:  # pragma: no cover - external API
            raise BillingError("Failed to create Stripe checkout session.") from exc

        session_id = getattr(session, "id", None)
        session_url = getattr(session, "url", None)
        if not session_id or not session_url:
            raise BillingError("Stripe checkout session response is incomplete.")

        return CheckoutSessionResult(session_id=str(session_id), checkout_url=str(session_url))

    def get_customer_portal_url(self, *, customer_id: str, return_url: str) -> str | None:
        try:
            portal = stripe.billing_portal.Session.create(customer=customer_id, return_url=return_url)
        except Exception:  # pragma: no cover - external API
            logger.exception("Failed to create Stripe portal session for customer=%s", customer_id)
            return None
        url = getattr(portal, "url", None)
        return str(url) if url else None

    def verify_webhook(self, *, signature: str, payload: bytes) -> BillingWebhookEvent:
        try:
            event = stripe.Webhook.construct_event(payload=payload, sig_header=signature, secret=self._webhook_secret)
        except Exception as exc:  # pragma: no cover - external API
            raise BillingError("Invalid Stripe webhook signature.") from exc

        event_data = _as_dict(event)
        event_type = str(event_data.get("type", ""))
        data_object = _as_dict(event_data.get("data", {})).get("object", {})
        data_object = _as_dict(data_object)

        if event_type.startswith("customer.subscription."):
            return BillingWebhookEvent(
                event_type=event_type,
                subscription=_map_subscription(data_object),
                checkout_completed=None,
            )

        if event_type == "checkout.session.completed":
            return BillingWebhookEvent(
                event_type=event_type,
                subscription=None,
                checkout_completed=CheckoutCompletedEventData(
                    user_id=data_object.get("client_reference_id"),
                    customer_id=data_object.get("customer"),
                ),
            )

        return BillingWebhookEvent(event_type=event_type, subscription=None, checkout_completed=None)


def _map_subscription(data: dict[str, Any]) -> ProviderSubscription:
    status = str(data.get("status"))
    period_end = data.get("current_period_end")
    if period_end is None:
        # Newer API versions report the billing period per subscription item.
        items = _as_dict(data.get("items") or {}).get("data") or []
        if items:
            period_end = _as_dict(items[0]).get("current_period_end")
    return ProviderSubscription(
        subscription_id=str(data.get("id")),
        customer_id=data.get("customer"),
        status=status,
        plan=map_provider_status_to_plan(status),
        trial_ends_at=_to_datetime(data.get("trial_end")),
        current_period_end=_to_datetime(period_end),
    )


def _as_dict(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    for attr in ("to_dict", "to_dict_recursive"):
        method = getattr(value, attr, None)
        if callable(method):
            return method()
    return dict(value)


def _to_datetime(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
