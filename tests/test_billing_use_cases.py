from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from astrogate.application.dto.billing import (
    BillingWebhookEvent,
    BillingWebhookInput,
    CheckoutCompletedEventData,
    CheckoutSessionResult,
    CreateCheckoutSessionInput,
    ProviderSubscription,
)
from astrogate.application.use_cases.billing import (
    CreateCheckoutSessionUseCase,
    GetCustomerPortalUseCase,
    ProcessBillingWebhookUseCase,
)
from astrogate.domain.entities.user import User
from astrogate.domain.exceptions import (
    BillingCustomerMissingError,
    BillingError,
    BillingUnavailableError,
    UserNotFoundError,
)
from astrogate.infrastructure.billing.null_billing_provider import NullBillingProvider


class FakeBillingProvider:
    def __init__(self, *, portal_url: str | None = "https://pay.example.com/portal"):
        self._portal_url = portal_url
        self.checkouts: list[dict] = []

    @property
    def is_available(self) -> bool:
        return True

    def get_user_subscription(self, user_id, *, force_sync=False):
        raise NotImplementedError

    def create_checkout_session(self, *, product_id: str, metadata: dict[str, str]) -> CheckoutSessionResult:
        self.checkouts.append({"product_id": product_id, "metadata": metadata})
        return CheckoutSessionResult(session_id="cs_1", checkout_url="https://pay.example.com/cs_1")

    def get_customer_portal_url(self, *, customer_id: str) -> str | None:
        return self._portal_url


class FakeIdentityPort:
    def __init__(self, *users: User):
        self.users = {user.id: user for user in users}
        self.subscription_updates: list[dict] = []
        self.customer_links: list[tuple[str, str]] = []

    def get_user_by_id(self, *, user_id: str) -> User | None:
        return self.users.get(user_id)

    def get_user_by_customer_id(self, *, customer_id: str) -> User | None:
        return next((user for user in self.users.values() if user.customer_id == customer_id), None)

    def get_user_by_subscription_id(self, *, subscription_id: str) -> User | None:
        return next(
            (user for user in self.users.values() if user.subscription_id == subscription_id),
            None,
        )

    def update_user_subscription(self, **kwargs) -> None:
        self.subscription_updates.append(kwargs)

    def update_user_customer_id(self, *, user_id: str, customer_id: str, synced_at: datetime) -> None:
        self.customer_links.append((user_id, customer_id))


class FakePaymentGateway:
    def __init__(self, event: BillingWebhookEvent | None = None, error: Exception | None = None):
        self._event = event
        self._error = error
        self.verified: list[tuple[str, bytes]] = []

    def verify_webhook(self, *, signature: str, payload: bytes) -> BillingWebhookEvent:
        self.verified.append((signature, payload))
        if self._error is not None:
            raise self._error
        return self._event


def _user(**overrides) -> User:
    base = User(
        id="user-1",
        username="alice",
        email="alice@example.com",
        password_hash=None,
        onboarding_completed=True,
        terms_accepted_version=None,
        privacy_accepted_version=None,
        subscription_plan="free",
        subscription_id=None,
        customer_id=None,
        trial_ends_at=None,
        subscription_ends_at=None,
        last_subscription_sync=None,
    )
    return replace(base, **overrides)


def _subscription_event(event_type: str, *, customer_id: str | None = "cus_1") -> BillingWebhookEvent:
    return BillingWebhookEvent(
        event_type=event_type,
        subscription=ProviderSubscription(
            subscription_id="sub_1",
            customer_id=customer_id,
            status="active",
            plan="pro",
            trial_ends_at=None,
            current_period_end=datetime.now(timezone.utc) + timedelta(days=30),
        ),
        checkout_completed=None,
    )


def _webhook(identity: FakeIdentityPort, gateway: FakePaymentGateway) -> ProcessBillingWebhookUseCase:
    return ProcessBillingWebhookUseCase(identity_port=identity, payment_gateway=gateway)


def _command() -> BillingWebhookInput:
    return BillingWebhookInput(signature="t=1,v1=abc", payload=b"{}")


def test_checkout_passes_user_metadata_to_provider():
    provider = FakeBillingProvider()
    use_case = CreateCheckoutSessionUseCase(billing_provider=provider, product_id="price_pro")

    output = use_case.execute(CreateCheckoutSessionInput(user_id="user-1", username="alice"))

    assert output.checkout_url == "https://pay.example.com/cs_1"
    assert output.session_id == "cs_1"
    assert provider.checkouts == [
        {"product_id": "price_pro", "metadata": {"user_id": "user-1", "username": "alice"}}
    ]


def test_checkout_without_provider_is_unavailable():
    use_case = CreateCheckoutSessionUseCase(billing_provider=NullBillingProvider(), product_id="price_pro")

    with pytest.raises(BillingUnavailableError):
        use_case.execute(CreateCheckoutSessionInput(user_id="user-1", username="alice"))


def test_checkout_without_product_is_unavailable():
    use_case = CreateCheckoutSessionUseCase(billing_provider=FakeBillingProvider(), product_id="")

    with pytest.raises(BillingUnavailableError):
        use_case.execute(CreateCheckoutSessionInput(user_id="user-1", username="alice"))


def test_portal_returns_provider_url():
    use_case = GetCustomerPortalUseCase(
        identity_port=FakeIdentityPort(_user(customer_id="cus_1")),
        billing_provider=FakeBillingProvider(),
    )

    assert use_case.execute(user_id="user-1").url == "https://pay.example.com/portal"


def test_portal_requires_known_user():
    use_case = GetCustomerPortalUseCase(identity_port=FakeIdentityPort(), billing_provider=FakeBillingProvider())

    with pytest.raises(UserNotFoundError):
        use_case.execute(user_id="user-1")


def test_portal_requires_billing_customer():
    use_case = GetCustomerPortalUseCase(
        identity_port=FakeIdentityPort(_user()),
        billing_provider=FakeBillingProvider(),
    )

    with pytest.raises(BillingCustomerMissingError):
        use_case.execute(user_id="user-1")


def test_portal_fails_when_provider_returns_no_url():
    use_case = GetCustomerPortalUseCase(
        identity_port=FakeIdentityPort(_user(customer_id="cus_1")),
        billing_provider=FakeBillingProvider(portal_url=None),
    )

    with pytest.raises(BillingError):
        use_case.execute(user_id="user-1")


def test_webhook_checkout_completed_links_customer():
    identity = FakeIdentityPort(_user())
    gateway = FakePaymentGateway(
        BillingWebhookEvent(
            event_type="checkout.session.completed",
            subscription=None,
            checkout_completed=CheckoutCompletedEventData(user_id="user-1", customer_id="cus_9"),
        )
    )

    output = _webhook(identity, gateway).execute(_command())

    assert output.handled is True
    assert identity.customer_links == [("user-1", "cus_9")]
    assert gateway.verified == [("t=1,v1=abc", b"{}")]


def test_webhook_subscription_update_is_applied_by_customer():
    identity = FakeIdentityPort(_user(customer_id="cus_1"))
    gateway = FakePaymentGateway(_subscription_event("customer.subscription.updated"))

    output = _webhook(identity, gateway).execute(_command())

    assert output.handled is True
    update = identity.subscription_updates[0]
    assert update["user_id"] == "user-1"
    assert update["subscription_plan"] == "pro"
    assert update["subscription_id"] == "sub_1"


def test_webhook_subscription_falls_back_to_subscription_id():
    identity = FakeIdentityPort(_user(subscription_id="sub_1"))
    gateway = FakePaymentGateway(_subscription_event("customer.subscription.created", customer_id="cus_new"))

    _webhook(identity, gateway).execute(_command())

    assert identity.subscription_updates[0]["customer_id"] == "cus_new"


def test_webhook_subscription_deleted_downgrades_to_free():
    identity = FakeIdentityPort(_user(customer_id="cus_1", subscription_plan="pro"))
    gateway = FakePaymentGateway(_subscription_event("customer.subscription.deleted"))

    _webhook(identity, gateway).execute(_command())

    assert identity.subscription_updates[0]["subscription_plan"] == "free"


def test_webhook_subscription_for_unknown_customer_is_logged_and_skipped(caplog):
    identity = FakeIdentityPort()
    gateway = FakePaymentGateway(_subscription_event("customer.subscription.updated"))

    with caplog.at_level(logging.ERROR):
        output = _webhook(identity, gateway).execute(_command())

    assert output.event_type == "customer.subscription.updated"
    assert output.handled is False
    assert identity.subscription_updates == []
    assert any("cus_1" in record.getMessage() for record in caplog.records)


def test_webhook_ignores_unrelated_events():
    gateway = FakePaymentGateway(
        BillingWebhookEvent(event_type="invoice.paid", subscription=None, checkout_completed=None)
    )

    output = _webhook(FakeIdentityPort(), gateway).execute(_command())

    assert output.event_type == "invoice.paid"
    assert output.handled is False


def test_webhook_with_bad_signature_raises_billing_error():
    gateway = FakePaymentGateway(error=BillingError("Invalid Stripe webhook signature."))

    with pytest.raises(BillingError):
        _webhook(FakeIdentityPort(), gateway).execute(_command())
