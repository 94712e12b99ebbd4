"""
Identity keys addressing entries in the identity map.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Union

_IDENTITY_ATTRIBUTES = ("id", "pk")


@dataclass(frozen=True)
class IdentityKey:
    """
    Composite of an entity type tag and the entity's identity value.
    """

    tag: Hashable
    identity: Hashable

    @classmethod
    def coerce(cls, key: "KeyLike") -> "IdentityKey":
        if isinstance(key, IdentityKey):
            return key
        if isinstance(key, tuple) and len(key) == 2:
            return cls(key[0], key[1])
        raise TypeError(
            f"Identity keys must be IdentityKey or (tag, identity) tuples, got {key!r}"
        )

    @classmethod
    def for_entity(cls, entity: Any) -> "IdentityKey | None":
        """
        Derive a key from an entity's class and its ``id`` (or ``pk``) value.

        Returns ``None`` for entities that have not been assigned an identity yet.
        """

        for attribute in _IDENTITY_ATTRIBUTES:
            value = getattr(entity, attribute, None)
            if value is not None:
                return cls(entity.__class__, value)
        return None

    def label(self) -> str:
        tag = self.tag.__name__ if isinstance(self.tag, type) else str(self.tag)
        return f"{tag}[{self.identity!r}]"


KeyLike = Union[IdentityKey, tuple]
