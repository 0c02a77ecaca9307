from __future__ import annotations

from datetime import datetime
from typing import Literal, Protocol


SameSite = Literal["lax", "strict", "none"]


class CookieStorePort(Protocol):
    def get(self, name: str) -> str | None:
        ...

    def set(
        self,
        name: str,
        value: str,
        *,
        http_only: bool,
        secure: bool,
        same_site: SameSite,
        expires: datetime,
        path: str,
    ) -> None:
        ...

    def delete(self, name: str, *, path: str = "/") -> None:
        ...
