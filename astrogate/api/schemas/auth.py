from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from astrogate.api.schemas.base import ApiModel


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=256)


class SessionResponse(ApiModel):
    user_id: str
    username: str
    expires_at: datetime


class SessionWithSubscriptionResponse(ApiModel):
    user_id: str
    username: str
    subscription_plan: str
    is_subscription_active: bool
    trial_days_left: int | None = None


class LogoutResponse(ApiModel):
    ok: bool
