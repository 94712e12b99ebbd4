"""
Lifecycle hooks registry for docmap integrations.
"""

from .dispatcher import (
    AFTER_INITIALIZE,
    CLEANUP,
    PREPARE,
    LifecycleDispatcher,
    LifecycleEvent,
    lifecycle,
)

__all__ = [
    "AFTER_INITIALIZE",
    "CLEANUP",
    "PREPARE",
    "LifecycleDispatcher",
    "LifecycleEvent",
    "lifecycle",
]
