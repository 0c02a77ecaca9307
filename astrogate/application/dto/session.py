from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionWithSubscriptionOutput:
    user_id: str
    username: str
    subscription_plan: str
    is_subscription_active: bool
    trial_days_left: int | None


@dataclass(frozen=True)
class LoginInput:
    username: str
    password: str


@dataclass(frozen=True)
class AdminLoginInput:
    username: str
    password: str
    ip: str | None
