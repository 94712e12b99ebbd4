"""
Utility helpers shared across docmap packages.
"""

from .logging import (
    clear_request_context,
    configure_logging,
    get_correlation_id,
    get_logger,
    get_request_context,
    set_correlation_id,
    set_request_context,
    time_call,
)

__all__ = [
    "clear_request_context",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "get_request_context",
    "set_correlation_id",
    "set_request_context",
    "time_call",
]
