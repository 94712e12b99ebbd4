"""
docmap public package initialization.

Exposes the identity map, its unit-of-work helpers, the web middleware and the
host application integration.
"""

from .errors import (  # noqa: F401
    ConfigurationError,
    DocmapError,
    DocumentNotFound,
    ValidationError,
    status_for,
)
from .hooks import lifecycle  # noqa: F401
from .identity import (  # noqa: F401
    IdentityKey,
    IdentityMap,
    Scope,
    begin_scope,
    end_scope,
    identity_map,
    scoped,
    unit_of_work,
)
from .integration import Integration  # noqa: F401
from .middleware import AsgiIdentityMapMiddleware, IdentityMapMiddleware  # noqa: F401

__all__ = [
    "IdentityKey",
    "IdentityMap",
    "Scope",
    "identity_map",
    "begin_scope",
    "end_scope",
    "unit_of_work",
    "scoped",
    "IdentityMapMiddleware",
    "AsgiIdentityMapMiddleware",
    "Integration",
    "lifecycle",
    "DocmapError",
    "DocumentNotFound",
    "ValidationError",
    "ConfigurationError",
    "status_for",
]
