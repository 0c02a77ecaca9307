from __future__ import annotations

from datetime import datetime
from typing import Protocol

from astrogate.domain.entities.user import AdminUser, User


class IdentityPort(Protocol):
    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_username(self, *, username: str) -> User | None:
        ...

    def get_user_by_customer_id(self, *, customer_id: str) -> User | None:
        ...

    def get_user_by_subscription_id(self, *, subscription_id: str) -> User | None:
        ...

    def update_user_subscription(
        self,
        *,
        user_id: str,
        subscription_plan: str,
        subscription_id: str | None,
        customer_id: str | None,
        trial_ends_at: datetime | None,
        subscription_ends_at: datetime | None,
        synced_at: datetime,
    ) -> None:
        ...

    def mark_subscription_synced(
        self,
        *,
        user_id: str,
        synced_at: datetime,
        subscription_plan: str | None = None,
    ) -> None:
        ...

    def update_user_customer_id(self, *, user_id: str, customer_id: str, synced_at: datetime) -> None:
        ...


class AdminIdentityPort(Protocol):
    def get_admin_by_username(self, *, username: str) -> AdminUser | None:
        ...

    def record_admin_login(self, *, admin_id: str, ip: str | None, logged_in_at: datetime) -> None:
        ...
