"""
Host application integration for docmap.
"""

from .app import DEFAULT_CONFIG_PATH, Integration

__all__ = ["DEFAULT_CONFIG_PATH", "Integration"]
