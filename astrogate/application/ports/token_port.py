from __future__ import annotations

from datetime import datetime
from typing import Protocol, TypeVar


TPayload = TypeVar("TPayload")


class TokenCodecPort(Protocol[TPayload]):
    def encode(self, payload: TPayload, *, now: datetime | None = None) -> str:
        ...

    def decode(self, token: str | None) -> TPayload | None:
        ...

    def expires_at(self, *, now: datetime) -> datetime:
        ...
