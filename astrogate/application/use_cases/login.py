from __future__ import annotations

import logging

from astrogate.application.dto.session import AdminLoginInput, LoginInput
from astrogate.application.ports.identity_port import AdminIdentityPort, IdentityPort
from astrogate.application.ports.password_hasher_port import PasswordHasherPort
from astrogate.application.use_cases.session_store import AdminSessionStore, SessionStore, utcnow
from astrogate.domain.entities.session import AdminSessionPayload, SessionPayload
from astrogate.domain.exceptions import InvalidCredentialsError


logger = logging.getLogger(__name__)


def normalize_username(username: str) -> str:
    return username.strip().lower()


class LoginUseCase:
    def __init__(
        self,
        *,
        identity_port: IdentityPort,
        password_hasher: PasswordHasherPort,
        session_store: SessionStore,
    ):
        self._identity_port = identity_port
        self._password_hasher = password_hasher
        self._session_store = session_store

    def execute(self, command: LoginInput) -> SessionPayload:
        user = self._identity_port.get_user_by_username(username=normalize_username(command.username))
        if user is None or not user.password_hash:
            raise InvalidCredentialsError("Invalid credentials.")
        if not self._password_hasher.verify(command.password, user.password_hash):
            raise InvalidCredentialsError("Invalid credentials.")

        session = self._session_store.create(user.id, user.username)
        logger.info("User logged in; user=%s", user.id)
        return session


class AdminLoginUseCase:
    def __init__(
        self,
        *,
        admin_identity_port: AdminIdentityPort,
        password_hasher: PasswordHasherPort,
        session_store: AdminSessionStore,
    ):
        self._admin_identity_port = admin_identity_port
        self._password_hasher = password_hasher
        self._session_store = session_store

    def execute(self, command: AdminLoginInput) -> AdminSessionPayload:
        admin = self._admin_identity_port.get_admin_by_username(
            username=normalize_username(command.username)
        )
        if admin is None or not self._password_hasher.verify(command.password, admin.password_hash):
            logger.warning("Admin login rejected; username=%s ip=%s", command.username, command.ip)
            raise InvalidCredentialsError("Invalid credentials.")

        session = self._session_store.create(admin.id, admin.username, admin.role)
        self._admin_identity_port.record_admin_login(admin_id=admin.id, ip=command.ip, logged_in_at=utcnow())
        logger.info("Admin logged in; admin=%s role=%s", admin.id, admin.role)
        return session
