from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

from astrogate.application.dto.billing import CheckoutSessionResult, ProviderSubscription
from astrogate.domain.entities.user import User
from astrogate.domain.exceptions import BillingError
from astrogate.infrastructure.billing.cached_billing_provider import (
    CachedBillingProvider,
    CachedBillingProviderSettings,
)


class FakeIdentityPort:
    def __init__(self, *users: User):
        self.users = {user.id: user for user in users}
        self.subscription_updates: list[dict] = []
        self.sync_marks: list[dict] = []

    def get_user_by_id(self, *, user_id: str) -> User | None:
        return self.users.get(user_id)

    def update_user_subscription(self, **kwargs) -> None:
        self.subscription_updates.append(kwargs)
        user = self.users[kwargs["user_id"]]
        self.users[user.id] = replace(
            user,
            subscription_plan=kwargs["subscription_plan"],
            subscription_id=kwargs["subscription_id"],
            customer_id=kwargs["customer_id"],
            trial_ends_at=kwargs["trial_ends_at"],
            subscription_ends_at=kwargs["subscription_ends_at"],
            last_subscription_sync=kwargs["synced_at"],
        )

    def mark_subscription_synced(self, *, user_id, synced_at, subscription_plan=None) -> None:
        self.sync_marks.append({"user_id": user_id, "subscription_plan": subscription_plan})
        user = self.users[user_id]
        self.users[user_id] = replace(
            user,
            subscription_plan=subscription_plan or user.subscription_plan,
            last_subscription_sync=synced_at,
        )


class FakePaymentGateway:
    def __init__(
        self,
        *,
        by_id: ProviderSubscription | None = None,
        by_email: ProviderSubscription | None = None,
        error: Exception | None = None,
    ):
        self._by_id = by_id
        self._by_email = by_email
        self._error = error
        self.lookups: list[tuple[str, str]] = []
        self.checkouts: list[dict] = []

    def get_subscription(self, *, subscription_id: str):
        self.lookups.append(("id", subscription_id))
        if self._error is not None:
            raise self._error
        return self._by_id

    def get_active_subscription_by_email(self, *, email: str):
        self.lookups.append(("email", email))
        if self._error is not None:
            raise self._error
        return self._by_email

    def create_checkout_session(self, **kwargs) -> CheckoutSessionResult:
        self.checkouts.append(kwargs)
        return CheckoutSessionResult(session_id="cs_1", checkout_url="https://pay.example.com/cs_1")

    def get_customer_portal_url(self, *, customer_id: str, return_url: str) -> str | None:
        return f"https://pay.example.com/portal/{customer_id}?return={return_url}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _user(**overrides) -> User:
    base = User(
        id="user-1",
        username="alice",
        email="alice@example.com",
        password_hash=None,
        onboarding_completed=True,
        terms_accepted_version="1",
        privacy_accepted_version="1",
        subscription_plan="free",
        subscription_id=None,
        customer_id=None,
        trial_ends_at=None,
        subscription_ends_at=None,
        last_subscription_sync=_now(),
    )
    return replace(base, **overrides)


def _provider(identity: FakeIdentityPort, gateway: FakePaymentGateway | None = None) -> CachedBillingProvider:
    return CachedBillingProvider(
        identity_port=identity,
        payment_gateway=gateway or FakePaymentGateway(),
        settings=CachedBillingProviderSettings(
            stale_after=timedelta(hours=24),
            success_url="https://app.example.com/billing/success",
            cancel_url="https://app.example.com/billing/cancel",
            portal_return_url="https://app.example.com/settings",
        ),
    )


def _pro_subscription() -> ProviderSubscription:
    return ProviderSubscription(
        subscription_id="sub_1",
        customer_id="cus_1",
        status="active",
        plan="pro",
        trial_ends_at=None,
        current_period_end=_now() + timedelta(days=30),
    )


def test_unknown_user_is_free_and_inactive():
    status = _provider(FakeIdentityPort()).get_user_subscription("missing")

    assert status.plan == "free"
    assert status.is_active is False


def test_recent_sync_is_not_stale():
    identity = FakeIdentityPort(_user(subscription_plan="pro", last_subscription_sync=_now()))

    status = _provider(identity).get_user_subscription("user-1")

    assert status.plan == "pro"
    assert status.is_active is True
    assert status.is_stale is False


def test_sync_older_than_a_day_is_stale():
    identity = FakeIdentityPort(
        _user(subscription_plan="pro", last_subscription_sync=_now() - timedelta(hours=25))
    )

    status = _provider(identity).get_user_subscription("user-1")

    assert status.plan == "pro"
    assert status.is_stale is True


def test_never_synced_is_stale():
    identity = FakeIdentityPort(_user(last_subscription_sync=None))

    assert _provider(identity).get_user_subscription("user-1").is_stale is True


def test_trial_days_left_rounds_up():
    identity = FakeIdentityPort(
        _user(subscription_plan="trial", trial_ends_at=_now() + timedelta(hours=36))
    )

    status = _provider(identity).get_user_subscription("user-1")

    assert status.plan == "trial"
    assert status.is_active is True
    assert status.trial_days_left == 2


def test_expired_trial_resolves_to_free():
    identity = FakeIdentityPort(
        _user(subscription_plan="trial", trial_ends_at=_now() - timedelta(hours=1))
    )

    status = _provider(identity).get_user_subscription("user-1")

    assert status.plan == "free"
    assert status.is_active is False
    assert status.trial_days_left == 0


def test_force_sync_writes_gateway_subscription_back():
    identity = FakeIdentityPort(
        _user(subscription_id="sub_1", last_subscription_sync=_now() - timedelta(days=3))
    )
    gateway = FakePaymentGateway(by_id=_pro_subscription())

    status = _provider(identity, gateway).get_user_subscription("user-1", force_sync=True)

    assert status.plan == "pro"
    assert status.is_active is True
    assert status.is_stale is False
    assert identity.subscription_updates[0]["customer_id"] == "cus_1"
    assert gateway.lookups == [("id", "sub_1")]


def test_force_sync_falls_back_to_email_lookup():
    identity = FakeIdentityPort(_user())
    gateway = FakePaymentGateway(by_email=_pro_subscription())

    status = _provider(identity, gateway).get_user_subscription("user-1", force_sync=True)

    assert status.plan == "pro"
    assert gateway.lookups == [("email", "alice@example.com")]


def test_failed_sync_returns_cached_status_marked_stale():
    identity = FakeIdentityPort(_user(subscription_plan="pro", subscription_id="sub_1"))
    gateway = FakePaymentGateway(error=BillingError("gateway down"))

    status = _provider(identity, gateway).get_user_subscription("user-1", force_sync=True)

    assert status.plan == "pro"
    assert status.is_stale is True
    assert identity.subscription_updates == []


def test_sync_without_subscription_downgrades_plain_account():
    identity = FakeIdentityPort(_user(subscription_plan="pro"))

    status = _provider(identity).get_user_subscription("user-1", force_sync=True)

    assert status.plan == "free"
    assert identity.sync_marks == [{"user_id": "user-1", "subscription_plan": "free"}]


def test_sync_without_subscription_keeps_lifetime_plan():
    identity = FakeIdentityPort(_user(subscription_plan="lifetime"))

    status = _provider(identity).get_user_subscription("user-1", force_sync=True)

    assert status.plan == "lifetime"
    assert identity.sync_marks == [{"user_id": "user-1", "subscription_plan": None}]


def test_sync_without_subscription_keeps_plan_of_linked_customer():
    identity = FakeIdentityPort(_user(subscription_plan="pro", customer_id="cus_1"))

    status = _provider(identity).get_user_subscription("user-1", force_sync=True)

    assert status.plan == "pro"


def test_checkout_uses_linked_customer():
    identity = FakeIdentityPort(_user(customer_id="cus_1"))
    gateway = FakePaymentGateway()

    result = _provider(identity, gateway).create_checkout_session(
        product_id="price_pro",
        metadata={"user_id": "user-1", "username": "alice"},
    )

    assert result.session_id == "cs_1"
    assert gateway.checkouts[0]["price_id"] == "price_pro"
    assert gateway.checkouts[0]["customer_id"] == "cus_1"
    assert gateway.checkouts[0]["success_url"] == "https://app.example.com/billing/success"


def test_portal_url_uses_configured_return_url():
    url = _provider(FakeIdentityPort()).get_customer_portal_url(customer_id="cus_1")

    assert url == "https://pay.example.com/portal/cus_1?return=https://app.example.com/settings"
