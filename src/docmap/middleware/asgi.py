"""
ASGI middleware wrapping every connection in an identity map unit of work.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, MutableMapping, Optional

from ..identity import IdentityMap, unit_of_work
from ..utils import clear_request_context, get_logger, set_correlation_id, set_request_context, time_call

Scope = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send = Callable[[MutableMapping[str, Any]], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

_SCOPED_TYPES = ("http", "websocket")


def _request_id(scope: Scope) -> str | None:
    for name, value in scope.get("headers") or ():
        if name.lower() == b"x-request-id":
            return value.decode("latin-1")
    return None


class AsgiIdentityMapMiddleware:
    """
    Clear the identity map around each HTTP request or websocket session.

    ``lifespan`` and other connection types pass through untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        identity_map: Optional[IdentityMap] = None,
        *,
        slow_request_ms: int = 500,
    ) -> None:
        self.app = app
        self.identity_map = identity_map
        self.slow_request_ms = slow_request_ms
        self.logger = get_logger("middleware.asgi")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in _SCOPED_TYPES:
            await self.app(scope, receive, send)
            return

        set_correlation_id(_request_id(scope))
        set_request_context(scope.get("method") or scope["type"], scope.get("path"))
        with time_call(
            scope["type"],
            self.logger,
            threshold_ms=self.slow_request_ms,
            method=scope.get("method"),
            path=scope.get("path"),
        ):
            try:
                with unit_of_work(self.identity_map):
                    await self.app(scope, receive, send)
            finally:
                clear_request_context()
