from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ProviderSubscription:
    subscription_id: str
    customer_id: str | None
    status: str
    plan: str
    trial_ends_at: datetime | None
    current_period_end: datetime | None


@dataclass(frozen=True)
class CheckoutSessionResult:
    session_id: str
    checkout_url: str


@dataclass(frozen=True)
class CreateCheckoutSessionInput:
    user_id: str
    username: str


@dataclass(frozen=True)
class CreateCheckoutSessionOutput:
    session_id: str
    checkout_url: str


@dataclass(frozen=True)
class CustomerPortalOutput:
    url: str


@dataclass(frozen=True)
class BillingWebhookInput:
    signature: str
    payload: bytes


@dataclass(frozen=True)
class BillingWebhookOutput:
    event_type: str
    handled: bool


@dataclass(frozen=True)
class CheckoutCompletedEventData:
    user_id: str | None
    customer_id: str | None


@dataclass(frozen=True)
class BillingWebhookEvent:
    event_type: str
    subscription: ProviderSubscription | None
    checkout_completed: CheckoutCompletedEventData | None
