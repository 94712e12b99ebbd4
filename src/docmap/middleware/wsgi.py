"""
WSGI middleware wrapping every request in an identity map unit of work.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Optional

from ..identity import IdentityMap, begin_scope, end_scope
from ..utils import clear_request_context, get_logger, set_correlation_id, set_request_context, time_call

WSGIApp = Callable[[dict, Callable[..., Any]], Iterable[bytes]]


class _ScopedResponse:
    """
    Response iterable that ends the unit of work exactly once.

    The scope ends on ``close()``, or as soon as iteration raises, so bodies
    are still streamed lazily from the wrapped application.
    """

    def __init__(self, result: Iterable[bytes], release: Callable[[], None]) -> None:
        self._result = result
        self._release = release
        self._released = False

    def __iter__(self) -> Iterator[bytes]:
        try:
            yield from self._result
        except BaseException:
            self._finish()
            raise

    def close(self) -> None:
        try:
            close = getattr(self._result, "close", None)
            if close is not None:
                close()
        finally:
            self._finish()

    def _finish(self) -> None:
        if self._released:
            return
        self._released = True
        self._release()


class IdentityMapMiddleware:
    """
    Clear the identity map around each WSGI request.
    """

    def __init__(
        self,
        app: WSGIApp,
        identity_map: Optional[IdentityMap] = None,
        *,
        slow_request_ms: int = 500,
    ) -> None:
        self.app = app
        self.identity_map = identity_map
        self.slow_request_ms = slow_request_ms
        self.logger = get_logger("middleware.wsgi")

    def __call__(self, environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        set_correlation_id(environ.get("HTTP_X_REQUEST_ID"))
        set_request_context(environ.get("REQUEST_METHOD"), environ.get("PATH_INFO"))
        timer = time_call(
            "request",
            self.logger,
            threshold_ms=self.slow_request_ms,
            method=environ.get("REQUEST_METHOD"),
            path=environ.get("PATH_INFO"),
        )
        timer.__enter__()
        begin_scope(self.identity_map)

        def release() -> None:
            try:
                end_scope(self.identity_map)
            finally:
                timer.__exit__(None, None, None)
                clear_request_context()

        try:
            result = self.app(environ, start_response)
        except BaseException:
            release()
            raise
        return _ScopedResponse(result, release)
