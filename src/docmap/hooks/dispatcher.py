"""
Lifecycle dispatcher connecting docmap to a host application's boot and reload events.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from ..utils import get_logger

LifecycleHandler = Callable[..., None]


@dataclass(frozen=True)
class LifecycleEvent:
    name: str


PREPARE = LifecycleEvent("prepare")
CLEANUP = LifecycleEvent("cleanup")
AFTER_INITIALIZE = LifecycleEvent("after_initialize")


class LifecycleDispatcher:
    """
    Maintains handlers for application lifecycle events.

    ``prepare`` fires before serving (and again on every code reload in
    development), ``cleanup`` fires when loaded code is unloaded or a console
    is reset, ``after_initialize`` fires once boot completes.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[LifecycleHandler]] = defaultdict(list)
        self.logger = get_logger("hooks.lifecycle")

    def register(self, event: str | LifecycleEvent, handler: LifecycleHandler) -> LifecycleHandler:
        self._handlers[self._event_name(event)].append(handler)
        return handler

    def fire(self, event: str | LifecycleEvent, **context: Any) -> None:
        name = self._event_name(event)
        handlers = list(self._handlers.get(name, []))
        self.logger.debug("Firing '%s' to %s handler(s)", name, len(handlers))
        for handler in handlers:
            handler(**context)

    def handlers(self, event: str | LifecycleEvent) -> List[LifecycleHandler]:
        return list(self._handlers.get(self._event_name(event), []))

    def to_prepare(self, handler: LifecycleHandler) -> LifecycleHandler:
        return self.register(PREPARE, handler)

    def to_cleanup(self, handler: LifecycleHandler) -> LifecycleHandler:
        return self.register(CLEANUP, handler)

    def clear(self) -> None:
        self._handlers.clear()

    @staticmethod
    def _event_name(event: str | LifecycleEvent) -> str:
        return event.name if isinstance(event, LifecycleEvent) else event


lifecycle = LifecycleDispatcher()
