"""
Identity map ensuring a single in-memory instance per document within a unit of work.

Entries are partitioned per execution context: every thread, and every asyncio
task, sees its own :class:`Scope`. Partitions are created lazily on first access
and emptied by :meth:`IdentityMap.clear` at the end of each unit of work.
"""

from __future__ import annotations

import asyncio
import threading
from contextvars import ContextVar
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

from ..errors import DocumentNotFound
from ..utils import get_logger
from .keys import IdentityKey, KeyLike

Owner = Tuple[int, Optional[int]]


def _current_owner() -> Owner:
    try:
        task = asyncio.current_task()
    except RuntimeError:
        task = None
    return (threading.get_ident(), id(task) if task is not None else None)


class Scope:
    """
    Entries visible to a single execution context.

    A scope is a handle that can be passed down a call chain explicitly; it is
    only ever handed out to the context that created it. Writes and reads honour
    the owning map's ``enabled`` flag.
    """

    __slots__ = ("owner", "identity_map", "_entries")

    def __init__(self, owner: Owner, identity_map: "IdentityMap | None" = None) -> None:
        self.owner = owner
        self.identity_map = identity_map
        self._entries: Dict[IdentityKey, Any] = {}

    @property
    def enabled(self) -> bool:
        return self.identity_map is None or self.identity_map.enabled

    def get(self, key: KeyLike) -> Any | None:
        if not self.enabled:
            return None
        return self._entries.get(IdentityKey.coerce(key))

    def put(self, key: KeyLike, entity: Any) -> None:
        if not self.enabled:
            return
        self._entries[IdentityKey.coerce(key)] = entity

    def remove(self, key: KeyLike) -> None:
        self._entries.pop(IdentityKey.coerce(key), None)

    def clear(self) -> int:
        dropped = len(self._entries)
        self._entries.clear()
        return dropped

    def values(self) -> List[Any]:
        return list(self._entries.values())

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        try:
            return IdentityKey.coerce(key) in self._entries  # type: ignore[arg-type]
        except TypeError:
            return False

    def __repr__(self) -> str:
        return f"<Scope owner={self.owner} entries={len(self._entries)}>"


class IdentityMap:
    """
    Stores entities keyed by (type tag, identity value), isolated per execution context.
    """

    def __init__(self, name: str = "default", *, enabled: bool = True) -> None:
        self.name = name
        self.enabled = enabled
        self._scope: ContextVar[Scope | None] = ContextVar(
            f"docmap_identity_map_{name}", default=None
        )
        self.logger = get_logger("identity.map")

    # ------------------------------------------------------------------ #
    # Scope access
    # ------------------------------------------------------------------ #
    def scope(self) -> Scope:
        """
        Return the current execution context's scope, creating it on first use.
        """

        owner = _current_owner()
        current = self._scope.get()
        if current is None or current.owner != owner:
            # Inherited from another thread or a parent task: never share it.
            current = Scope(owner, self)
            self._scope.set(current)
        return current

    # ------------------------------------------------------------------ #
    # Core operations
    # ------------------------------------------------------------------ #
    def get(self, key: KeyLike) -> Any | None:
        return self.scope().get(key)

    def put(self, key: KeyLike, entity: Any) -> None:
        self.scope().put(key, entity)

    def clear(self) -> None:
        dropped = self.scope().clear()
        if dropped:
            self.logger.debug(
                "Cleared %s identity map entries from '%s'",
                dropped,
                self.name,
                extra={"identity_map": self.name, "dropped": dropped},
            )

    # ------------------------------------------------------------------ #
    # Helpers used by the mapping layer
    # ------------------------------------------------------------------ #
    def fetch(self, key: KeyLike, loader: Callable[[], Any], *, required: bool = False) -> Any | None:
        """
        Return the cached entity for ``key`` or load, remember, and return it.
        """

        identity_key = IdentityKey.coerce(key)
        cached = self.get(identity_key)
        if cached is not None:
            return cached
        entity = loader()
        if entity is None:
            if required:
                raise DocumentNotFound(identity_key.tag, identity_key.identity)
            return None
        self.put(identity_key, entity)
        return entity

    def add(self, entity: Any) -> None:
        key = IdentityKey.for_entity(entity)
        if key is None:
            return
        self.put(key, entity)

    def remove(self, key: KeyLike) -> None:
        self.scope().remove(key)

    def values(self) -> List[Any]:
        return self.scope().values()

    def __len__(self) -> int:
        return len(self.scope())

    def __contains__(self, key: Hashable) -> bool:
        return key in self.scope()

    def __repr__(self) -> str:
        state = "enabled" if self.enabled else "disabled"
        return f"<IdentityMap {self.name!r} {state}>"


identity_map = IdentityMap()
