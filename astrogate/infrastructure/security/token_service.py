from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from astrogate.domain.entities.session import ADMIN_ROLES, AdminSessionPayload, SessionPayload
from astrogate.domain.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
MIN_SECRET_BYTES = 32

SESSION_FALLBACK_SECRET = "dev-only-secret-key-change-in-prod-32chars"
ADMIN_SESSION_FALLBACK_SECRET = "dev-only-admin-secret-key-change-in-prod-32c"


@dataclass(frozen=True)
class SigningConfig:
    secret: str
    is_fallback: bool = False


def build_signing_config(
    *,
    env_name: str,
    secret: str | None,
    fallback_secret: str,
    production: bool,
) -> SigningConfig:
    if production:
        if not secret:
            raise ConfigurationError(f"{env_name} must be set in production.")
        if len(secret.encode("utf-8")) < MIN_SECRET_BYTES:
            raise ConfigurationError(f"{env_name} must be at least {MIN_SECRET_BYTES} bytes long.")
        return SigningConfig(secret=secret)

    if not secret:
        logger.warning("%s is not set; using the built-in development key. Do not deploy like this.", env_name)
        return SigningConfig(secret=fallback_secret, is_fallback=True)

    if len(secret.encode("utf-8")) < MIN_SECRET_BYTES:
        logger.warning("%s is shorter than %d bytes.", env_name, MIN_SECRET_BYTES)
    return SigningConfig(secret=secret)


class _JwtSessionCodec:
    token_type = ""

    def __init__(self, *, signing: SigningConfig, ttl: timedelta):
        self._signing = signing
        self._ttl = ttl

    @property
    def uses_fallback_key(self) -> bool:
        return self._signing.is_fallback

    def expires_at(self, *, now: datetime) -> datetime:
        return now + self._ttl

    def _encode_claims(self, claims: dict[str, Any], *, now: datetime | None) -> str:
        issued_at = now or utcnow()
        payload = {
            **claims,
            "typ": self.token_type,
            "iat": int(issued_at.timestamp()),
            "exp": int(self.expires_at(now=issued_at).timestamp()),
        }
        return jwt.encode(payload, self._signing.secret, algorithm=ALGORITHM)

    def _decode_claims(self, token: str | None) -> dict[str, Any] | None:
        if not isinstance(token, str) or not token:
            return None
        try:
            claims = jwt.decode(
                token,
                self._signing.secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except (jwt.PyJWTError, UnicodeError):
            return None
        if claims.get("typ") != self.token_type:
            return None
        return claims


class SessionTokenService(_JwtSessionCodec):
    token_type = "session"

    def encode(self, payload: SessionPayload, *, now: datetime | None = None) -> str:
        return self._encode_claims(
            {
                "sub": payload.user_id,
                "username": payload.username,
                "expiresAt": payload.expires_at.isoformat(),
            },
            now=now,
        )

    def decode(self, token: str | None) -> SessionPayload | None:
        claims = self._decode_claims(token)
        if claims is None:
            return None
        user_id = claims.get("sub")
        username = claims.get("username")
        expires_at = _parse_datetime(claims.get("expiresAt"))
        if not _non_empty_str(user_id) or not isinstance(username, str) or expires_at is None:
            return None
        return SessionPayload(user_id=user_id, username=username, expires_at=expires_at)


class AdminSessionTokenService(_JwtSessionCodec):
    token_type = "admin_session"

    def encode(self, payload: AdminSessionPayload, *, now: datetime | None = None) -> str:
        return self._encode_claims(
            {
                "sub": payload.admin_id,
                "username": payload.username,
                "role": payload.role,
                "expiresAt": payload.expires_at.isoformat(),
            },
            now=now,
        )

    def decode(self, token: str | None) -> AdminSessionPayload | None:
        claims = self._decode_claims(token)
        if claims is None:
            return None
        admin_id = claims.get("sub")
        username = claims.get("username")
        role = claims.get("role")
        expires_at = _parse_datetime(claims.get("expiresAt"))
        if not _non_empty_str(admin_id) or not _non_empty_str(username):
            return None
        if role not in ADMIN_ROLES or expires_at is None:
            return None
        return AdminSessionPayload(admin_id=admin_id, username=username, role=role, expires_at=expires_at)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
