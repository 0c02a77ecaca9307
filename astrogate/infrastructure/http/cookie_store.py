from __future__ import annotations

from datetime import datetime

from fastapi import Request, Response

from astrogate.application.ports.cookie_port import CookieStorePort, SameSite


class ResponseCookieStore(CookieStorePort):
    """Request-scoped cookie store.

    Reads come from the incoming request; writes go to the outgoing response.
    Writes made earlier in the same request are visible to later reads.
    """

    def __init__(self, request: Request, response: Response):
        self._request = request
        self._response = response
        self._pending: dict[str, str | None] = {}

    def get(self, name: str) -> str | None:
        if name in self._pending:
            return self._pending[name]
        return self._request.cookies.get(name)

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
        self._response.set_cookie(
            key=name,
            value=value,
            httponly=http_only,
            secure=secure,
            samesite=same_site,
            expires=expires,
            path=path,
        )
        self._pending[name] = value

    def delete(self, name: str, *, path: str = "/") -> None:
        self._response.delete_cookie(key=name, path=path)
        self._pending[name] = None
