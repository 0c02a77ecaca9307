from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from astrogate.api.deps import get_admin_session_token_service, get_subscription_resolver
from astrogate.domain.entities.session import AdminSessionPayload
from astrogate.domain.entities.subscription import SubscriptionStatus, free_status
from astrogate.infrastructure.security.token_service import AdminSessionTokenService, SigningConfig
from astrogate.main import app


CODEC = AdminSessionTokenService(
    signing=SigningConfig(secret="router-test-admin-secret-0123456789abcdef"),
    ttl=timedelta(hours=8),
)


class FakeResolver:
    def __init__(self):
        self.calls: list[tuple[str, bool]] = []

    def resolve(self, user_id: str, *, force_sync: bool = False) -> SubscriptionStatus:
        self.calls.append((user_id, force_sync))
        return free_status()


@pytest.fixture
def resolver():
    fake = FakeResolver()
    app.dependency_overrides[get_admin_session_token_service] = lambda: CODEC
    app.dependency_overrides[get_subscription_resolver] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


def _client(role: str | None) -> TestClient:
    client = TestClient(app)
    if role is not None:
        now = datetime.now(timezone.utc)
        payload = AdminSessionPayload(
            admin_id="admin-1",
            username="root",
            role=role,
            expires_at=now + timedelta(hours=8),
        )
        client.cookies.set("admin_session", CODEC.encode(payload, now=now))
    return client


def test_admin_session_requires_cookie(resolver):
    assert _client(None).get("/admin/api/session").status_code == 401


def test_admin_session_returns_role(resolver):
    response = _client("admin").get("/admin/api/session")

    assert response.status_code == 200
    assert response.json()["adminId"] == "admin-1"
    assert response.json()["role"] == "admin"


def test_user_subscription_lookup_forbidden_for_plain_admin(resolver):
    response = _client("admin").get("/admin/api/users/user-1/subscription")

    assert response.status_code == 403
    assert resolver.calls == []


def test_user_subscription_lookup_allowed_for_superadmin(resolver):
    response = _client("superadmin").get(
        "/admin/api/users/user-1/subscription",
        params={"forceSync": "true"},
    )

    assert response.status_code == 200
    assert response.json()["plan"] == "free"
    assert resolver.calls == [("user-1", True)]


def test_user_session_cookie_is_not_an_admin_session(resolver):
    client = TestClient(app)
    client.cookies.set("session", "not-an-admin-token")

    assert client.get("/admin/api/session").status_code == 401
