"""Origin allow-list enforcement for browser callers."""
from __future__ import annotations
import logging
from collections.abc import Iterable

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from gemini_relay.common.errors import ORIGIN_REJECTED_BODY

LOGGER = logging.getLogger("gemini_relay.relay.cors")


def is_origin_allowed(origin: str | None, allowed: Iterable[str]) -> bool:
    """Requests without an Origin header (non-browser clients) always pass."""
    if origin is None:
        return True
    return origin in allowed


class OriginGuardMiddleware:
    """Reject disallowed origins before routing; the handler never runs for them."""

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str]) -> None:
        self.app = app
        self.allowed_origins = frozenset(allowed_origins)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin")
        if is_origin_allowed(origin, self.allowed_origins):
            await self.app(scope, receive, send)
            return

        LOGGER.warning("Blocked request from disallowed origin %s", origin)
        response = JSONResponse(status_code=403, content=ORIGIN_REJECTED_BODY)
        await response(scope, receive, send)
