"""
Configuration loading for docmap.
"""

from .dsns import DSNConfig, parse_dsn
from .settings import DocmapConfig, SessionConfig, configured, current, install, load, reset

__all__ = [
    "DSNConfig",
    "DocmapConfig",
    "SessionConfig",
    "configured",
    "current",
    "install",
    "load",
    "parse_dsn",
    "reset",
]
