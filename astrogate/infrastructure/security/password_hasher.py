from __future__ import annotations

from passlib.context import CryptContext

from astrogate.application.ports.password_hasher_port import PasswordHasherPort


# Accounts created before the migration carry bcrypt hashes; new hashes use argon2.
_SCHEMES = ["argon2", "bcrypt"]


class PasswordHasher(PasswordHasherPort):
    def __init__(self, schemes: list[str] | None = None):
        self._ctx = CryptContext(schemes=schemes or _SCHEMES, deprecated="auto")

    def hash(self, plain_password: str) -> str:
        return self._ctx.hash(plain_password)

    def verify(self, plain_password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        try:
            return self._ctx.verify(plain_password, password_hash)
        except (ValueError, TypeError):
            return False
