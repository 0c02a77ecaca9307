from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Generic, TypeVar

from astrogate.application.ports.cookie_port import CookieStorePort, SameSite
from astrogate.application.ports.token_port import TokenCodecPort
from astrogate.domain.entities.session import AdminRole, AdminSessionPayload, SessionPayload


SESSION_COOKIE_NAME = "session"
ADMIN_SESSION_COOKIE_NAME = "admin_session"

TPayload = TypeVar("TPayload")


@dataclass(frozen=True)
class CookiePolicy:
    name: str
    path: str
    same_site: SameSite
    secure: bool
    lifetime: timedelta


def user_cookie_policy(*, secure: bool, ttl_days: int = 7) -> CookiePolicy:
    return CookiePolicy(
        name=SESSION_COOKIE_NAME,
        path="/",
        same_site="lax",
        secure=secure,
        lifetime=timedelta(days=ttl_days),
    )


def admin_cookie_policy(*, secure: bool, ttl_hours: int = 8) -> CookiePolicy:
    return CookiePolicy(
        name=ADMIN_SESSION_COOKIE_NAME,
        path="/admin",
        same_site="strict",
        secure=secure,
        lifetime=timedelta(hours=ttl_hours),
    )


class _CookieSessionStore(Generic[TPayload]):
    def __init__(
        self,
        *,
        cookies: CookieStorePort,
        codec: TokenCodecPort[TPayload],
        policy: CookiePolicy,
    ):
        self._cookies = cookies
        self._codec = codec
        self._policy = policy

    def read(self) -> TPayload | None:
        return self._codec.decode(self._cookies.get(self._policy.name))

    def refresh(self) -> TPayload | None:
        """Extend the cookie lifetime of a valid session; ``None`` when there is none."""
        token = self._cookies.get(self._policy.name)
        payload = self._codec.decode(token)
        if token is None or payload is None:
            return None
        self._store(token, expires=utcnow() + self._policy.lifetime)
        return payload

    def destroy(self) -> None:
        self._cookies.delete(self._policy.name, path=self._policy.path)

    def _issue(self, payload: TPayload, *, now: datetime) -> None:
        token = self._codec.encode(payload, now=now)
        self._store(token, expires=self._codec.expires_at(now=now))

    def _store(self, token: str, *, expires: datetime) -> None:
        self._cookies.set(
            self._policy.name,
            token,
            http_only=True,
            secure=self._policy.secure,
            same_site=self._policy.same_site,
            expires=expires,
            path=self._policy.path,
        )


class SessionStore(_CookieSessionStore[SessionPayload]):
    def create(self, user_id: str, username: str) -> SessionPayload:
        now = utcnow()
        payload = SessionPayload(
            user_id=user_id,
            username=username,
            expires_at=self._codec.expires_at(now=now),
        )
        self._issue(payload, now=now)
        return payload


class AdminSessionStore(_CookieSessionStore[AdminSessionPayload]):
    def create(self, admin_id: str, username: str, role: AdminRole) -> AdminSessionPayload:
        now = utcnow()
        payload = AdminSessionPayload(
            admin_id=admin_id,
            username=username,
            role=role,
            expires_at=self._codec.expires_at(now=now),
        )
        self._issue(payload, now=now)
        return payload


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
