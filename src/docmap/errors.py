"""
Error hierarchy for docmap and the HTTP statuses web frameworks should map them to.
"""

from __future__ import annotations

from typing import Dict, Hashable, List, Mapping


class DocmapError(Exception):
    """Base error for docmap failures."""


class DocumentNotFound(DocmapError):
    """
    Raised when a lookup by identity that must succeed finds nothing.
    """

    def __init__(self, tag: Hashable, identity: Hashable) -> None:
        self.tag = tag
        self.identity = identity
        name = tag.__name__ if isinstance(tag, type) else str(tag)
        super().__init__(f"Document not found for {name} with id {identity!r}")


class ValidationError(DocmapError):
    """
    Aggregated validation error storing field-to-messages mapping.
    """

    def __init__(self, errors: Mapping[str, List[str]]) -> None:
        self.errors: Dict[str, List[str]] = {
            key: list(messages) for key, messages in errors.items()
        }
        message = self._format_message()
        super().__init__(message)

    def _format_message(self) -> str:
        segments = []
        for field, messages in self.errors.items():
            prefix = field if field != "__all__" else "non-field"
            combined = "; ".join(messages)
            segments.append(f"{prefix}: {combined}")
        return "; ".join(segments)


class ConfigurationError(DocmapError):
    """Raised when the docmap configuration is missing or invalid."""


class NoSessionsConfig(ConfigurationError):
    def __init__(self, source: str | None = None) -> None:
        where = f" in {source}" if source else ""
        super().__init__(f"No sessions configuration provided{where}.")


class NoDefaultSession(ConfigurationError):
    def __init__(self, names: List[str]) -> None:
        self.names = list(names)
        listed = ", ".join(self.names) or "none"
        super().__init__(f"No default session configured (sessions found: {listed}).")


class NoSessionDatabase(ConfigurationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No database provided for session '{name}'.")


class NoSessionHosts(ConfigurationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No hosts provided for session '{name}'.")


class InvalidConfiguration(ConfigurationError):
    """Raised when a configuration value cannot be parsed."""


RESCUE_RESPONSES: Dict[str, int] = {
    "docmap.errors.DocumentNotFound": 404,
    "docmap.errors.ValidationError": 422,
}


def _dotted_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def status_for(exc: BaseException, default: int = 500, responses: Mapping[str, int] | None = None) -> int:
    """
    Return the HTTP status registered for ``exc`` or one of its base classes.
    """

    table = RESCUE_RESPONSES if responses is None else responses
    for cls in type(exc).__mro__:
        status = table.get(_dotted_name(cls))
        if status is not None:
            return status
    return default
