from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from astrogate.api.schemas.base import ApiModel


class AdminLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=256)


class AdminSessionResponse(ApiModel):
    admin_id: str
    username: str
    role: str
    expires_at: datetime
