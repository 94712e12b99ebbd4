"""
Identity map components: keys, per-context scopes, unit-of-work wrappers.
"""

from .identity_map import IdentityMap, Scope, identity_map
from .keys import IdentityKey
from .scope import begin_scope, end_scope, scoped, unit_of_work

__all__ = [
    "IdentityKey",
    "IdentityMap",
    "Scope",
    "begin_scope",
    "end_scope",
    "identity_map",
    "scoped",
    "unit_of_work",
]
