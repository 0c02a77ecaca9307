from __future__ import annotations

from datetime import datetime

from sqlalchemy import text

from astrogate.application.ports.identity_port import AdminIdentityPort, IdentityPort
from astrogate.application.ports.usage_port import UsagePort
from astrogate.infrastructure.db.mappers.accounts_mapper import map_row_to_admin_user, map_row_to_user


_USER_COLUMNS = """
    id, username, email, password_hash, onboarding_completed,
    terms_accepted_version, privacy_accepted_version,
    subscription_plan, subscription_id, customer_id,
    trial_ends_at, subscription_ends_at, last_subscription_sync
"""


class SqlAccountsRepository(IdentityPort, AdminIdentityPort, UsagePort):
    def __init__(self, engine):
        self._engine = engine

    def _get_user_where(self, clause: str, params: dict):
        sql = f"""
            SELECT {_USER_COLUMNS}
            FROM public.users
            WHERE {clause}
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_user_by_id(self, *, user_id: str):
        return self._get_user_where("id = :user_id", {"user_id": user_id})

    def get_user_by_username(self, *, username: str):
        return self._get_user_where("lower(username) = :username", {"username": username.lower()})

    def get_user_by_customer_id(self, *, customer_id: str):
        return self._get_user_where("customer_id = :customer_id", {"customer_id": customer_id})

    def get_user_by_subscription_id(self, *, subscription_id: str):
        return self._get_user_where("subscription_id = :subscription_id", {"subscription_id": subscription_id})

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
        sql = """
            UPDATE public.users
            SET subscription_plan = :subscription_plan,
                subscription_id = :subscription_id,
                customer_id = :customer_id,
                trial_ends_at = :trial_ends_at,
                subscription_ends_at = :subscription_ends_at,
                last_subscription_sync = :synced_at,
                updated_at = now()
            WHERE id = :user_id
        """
        with self._engine.begin() as conn:
            conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "subscription_plan": subscription_plan,
                    "subscription_id": subscription_id,
                    "customer_id": customer_id,
                    "trial_ends_at": trial_ends_at,
                    "subscription_ends_at": subscription_ends_at,
                    "synced_at": synced_at,
                },
            )

    def mark_subscription_synced(
        self,
        *,
        user_id: str,
        synced_at: datetime,
        subscription_plan: str | None = None,
    ) -> None:
        sql = """
            UPDATE public.users
            SET last_subscription_sync = :synced_at,
                subscription_plan = COALESCE(:subscription_plan, subscription_plan),
                updated_at = now()
            WHERE id = :user_id
        """
        with self._engine.begin() as conn:
            conn.execute(
                text(sql),
                {"user_id": user_id, "synced_at": synced_at, "subscription_plan": subscription_plan},
            )

    def update_user_customer_id(self, *, user_id: str, customer_id: str, synced_at: datetime) -> None:
        sql = """
            UPDATE public.users
            SET customer_id = :customer_id,
                last_subscription_sync = :synced_at,
                updated_at = now()
            WHERE id = :user_id
        """
        with self._engine.begin() as conn:
            conn.execute(text(sql), {"user_id": user_id, "customer_id": customer_id, "synced_at": synced_at})

    def get_admin_by_username(self, *, username: str):
        sql = """
            SELECT id, username, password_hash, role
            FROM public.admin_users
            WHERE lower(username) = :username
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"username": username.lower()}).mappings().first()
        if row is None:
            return None
        return map_row_to_admin_user(row)

    def record_admin_login(self, *, admin_id: str, ip: str | None, logged_in_at: datetime) -> None:
        sql = """
            UPDATE public.admin_users
            SET last_login_at = :logged_in_at,
                last_login_ip = :ip,
                updated_at = now()
            WHERE id = :admin_id
        """
        with self._engine.begin() as conn:
            conn.execute(text(sql), {"admin_id": admin_id, "ip": ip, "logged_in_at": logged_in_at})

    def count_subjects(self, *, user_id: str) -> int:
        sql = """
            SELECT count(*) AS total
            FROM public.subjects
            WHERE owner_id = :user_id
        """
        with self._engine.connect() as conn:
            total = conn.execute(text(sql), {"user_id": user_id}).scalar_one()
        return int(total or 0)

    def get_ai_generations(self, *, user_id: str, day: str) -> int:
        sql = """
            SELECT count
            FROM public.user_ai_usage
            WHERE user_id = :user_id AND date = :day
            LIMIT 1
        """
        with self._engine.connect() as conn:
            value = conn.execute(text(sql), {"user_id": user_id, "day": day}).scalar_one_or_none()
        return int(value or 0)
