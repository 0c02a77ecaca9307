from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


AdminRole = Literal["admin", "superadmin"]

ADMIN_ROLES: frozenset[str] = frozenset({"admin", "superadmin"})


@dataclass(frozen=True)
class SessionPayload:
    user_id: str
    username: str
    expires_at: datetime


@dataclass(frozen=True)
class AdminSessionPayload:
    admin_id: str
    username: str
    role: AdminRole
    expires_at: datetime

    @property
    def is_superadmin(self) -> bool:
        return self.role == "superadmin"
