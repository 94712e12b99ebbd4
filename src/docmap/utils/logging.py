"""Request-aware logging helpers for docmap.

Every record emitted under the ``docmap`` logger carries the correlation id and
the request line of the unit of work it was logged from, so identity map
activity can be traced back to the request that caused it.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Optional

NO_REQUEST = "-"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_request_line: ContextVar[str] = ContextVar("request_line", default=NO_REQUEST)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        record.request = _request_line.get()
        return True


def configure_logging(level: int = logging.INFO) -> None:
    logger = logging.getLogger("docmap")
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(correlation_id)s | %(request)s | %(name)s | %(message)s"
    )
    handler.setFormatter(formatter)
    handler.addFilter(RequestContextFilter())
    logger.addHandler(handler)
    logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(f"docmap.{name}")


def set_correlation_id(value: Optional[str] = None) -> str:
    token = value or str(uuid.uuid4())
    _correlation_id.set(token)
    return token


def get_correlation_id() -> str:
    cid = _correlation_id.get()
    if cid is None:
        cid = set_correlation_id()
    return cid


def set_request_context(method: str | None, path: str | None) -> str:
    """
    Record the request line (``"GET /books/1"``) of the current unit of work.
    """

    parts = [part for part in (method, path) if part]
    line = " ".join(parts) or NO_REQUEST
    _request_line.set(line)
    return line


def get_request_context() -> str:
    return _request_line.get()


def clear_request_context() -> None:
    _request_line.set(NO_REQUEST)


def time_call(name: str, logger: logging.Logger, *, threshold_ms: int = 100, **fields):
    start = time.monotonic()

    class Timer:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            elapsed_ms = (time.monotonic() - start) * 1000
            level = logging.WARNING if elapsed_ms >= threshold_ms else logging.DEBUG
            extra = dict(fields, elapsed_ms=elapsed_ms)
            logger.log(level, "%s took %.2fms", name, elapsed_ms, extra=extra)

    return Timer()
