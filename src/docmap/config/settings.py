"""
Configuration for docmap sessions and identity map behaviour.

A configuration file is TOML keyed by environment name::

    [development.sessions.default]
    database = "library_development"
    hosts = ["localhost:27017"]

    [development.options]
    identity_map_enabled = true
    preload_models = true
    models = ["library.models"]
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..errors import (
    InvalidConfiguration,
    NoDefaultSession,
    NoSessionDatabase,
    NoSessionHosts,
    NoSessionsConfig,
)
from ..identity import IdentityMap, identity_map as default_identity_map
from ..utils import get_logger
from .dsns import DSNConfig, parse_dsn

DEFAULT_SESSION = "default"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

logger = get_logger("config")


def _parse_bool(value: Any, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise InvalidConfiguration(f"Invalid boolean value for '{key}': {value!r}")


def _parse_list(value: Any, *, key: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    raise InvalidConfiguration(f"Invalid list value for '{key}': {value!r}")


def _parse_table(value: Any, *, key: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return value
    raise InvalidConfiguration(f"Expected a table for '{key}', got {value!r}")


@dataclass
class SessionConfig:
    """
    Normalized configuration for a single named session.
    """

    name: str
    hosts: List[str]
    database: str
    options: Dict[str, Any] = field(default_factory=dict)
    uri: str | None = None
    dsn: DSNConfig | None = None

    @classmethod
    def from_mapping(cls, name: str, data: Mapping[str, Any]) -> "SessionConfig":
        data = _parse_table(data, key=f"sessions.{name}")
        uri = data.get("uri")
        if uri is not None and not isinstance(uri, str):
            raise InvalidConfiguration(f"Invalid uri for session '{name}': {uri!r}")
        dsn = parse_dsn(uri) if uri else None
        hosts = _parse_list(data.get("hosts"), key=f"{name}.hosts")
        if not hosts and dsn:
            hosts = list(dsn.hosts)
        database = data.get("database") or (dsn.database if dsn else None)
        if not database:
            raise NoSessionDatabase(name)
        if not hosts:
            raise NoSessionHosts(name)
        options: Dict[str, Any] = dict(dsn.query) if dsn else {}
        options.update(_parse_table(data.get("options"), key=f"sessions.{name}.options"))
        return cls(name=name, hosts=hosts, database=database, options=options, uri=uri, dsn=dsn)

    def redacted_uri(self) -> str:
        """
        Return a URI safe for logging (credentials removed).
        """

        if self.dsn:
            return self.dsn.redacted()
        return f"mongodb://{','.join(self.hosts)}/{self.database}"


@dataclass
class DocmapConfig:
    sessions: Dict[str, SessionConfig]
    identity_map_enabled: bool = True
    preload_models: bool = True
    models: List[str] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)
    source: str | None = None

    @property
    def default_session(self) -> SessionConfig:
        return self.sessions[DEFAULT_SESSION]

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        environment: str | None = None,
        source: str | None = None,
    ) -> "DocmapConfig":
        section: Any = data
        if environment is not None:
            section = data.get(environment)
            if section is None:
                raise NoSessionsConfig(f"{source or 'configuration'} [{environment}]")
        section = _parse_table(section, key=environment or "configuration")

        sessions_data = _parse_table(section.get("sessions"), key="sessions")
        if not sessions_data:
            raise NoSessionsConfig(source)
        if DEFAULT_SESSION not in sessions_data:
            raise NoDefaultSession(list(sessions_data))
        sessions = {
            name: SessionConfig.from_mapping(name, values)
            for name, values in sessions_data.items()
        }

        options = dict(_parse_table(section.get("options"), key="options"))
        identity_map_enabled = _parse_bool(
            options.pop("identity_map_enabled", True), key="identity_map_enabled"
        )
        preload_models = _parse_bool(options.pop("preload_models", True), key="preload_models")
        models = _parse_list(options.pop("models", None), key="models")
        return cls(
            sessions=sessions,
            identity_map_enabled=identity_map_enabled,
            preload_models=preload_models,
            models=models,
            options=options,
            source=source,
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str], *, environment: str | None = None) -> "DocmapConfig":
        path = Path(path)
        try:
            with path.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise InvalidConfiguration(f"Could not parse {path}: {exc}") from exc
        return cls.from_mapping(data, environment=environment, source=str(path))

    @classmethod
    def from_env(
        cls,
        prefix: str = "DOCMAP_",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "DocmapConfig":
        """
        Build a config from ``<prefix>URI`` and friends.
        """

        env = os.environ if environ is None else environ
        uri = env.get(f"{prefix}URI")
        if not uri:
            raise NoSessionsConfig(f"environment variable {prefix}URI")
        options: Dict[str, Any] = {}
        if f"{prefix}IDENTITY_MAP" in env:
            options["identity_map_enabled"] = env[f"{prefix}IDENTITY_MAP"]
        if f"{prefix}PRELOAD_MODELS" in env:
            options["preload_models"] = env[f"{prefix}PRELOAD_MODELS"]
        if f"{prefix}MODELS" in env:
            options["models"] = env[f"{prefix}MODELS"]
        return cls.from_mapping(
            {"sessions": {DEFAULT_SESSION: {"uri": uri}}, "options": options},
            source=f"{prefix}URI",
        )

    def apply(self, identity_map: IdentityMap | None = None) -> None:
        target = identity_map if identity_map is not None else default_identity_map
        target.enabled = self.identity_map_enabled


_current: DocmapConfig | None = None


def current() -> DocmapConfig | None:
    return _current


def configured() -> bool:
    return _current is not None


def install(config: DocmapConfig, identity_map: IdentityMap | None = None) -> DocmapConfig:
    global _current
    config.apply(identity_map)
    _current = config
    logger.info(
        "Loaded docmap configuration from %s (default session %s)",
        config.source or "mapping",
        config.default_session.redacted_uri(),
    )
    return config


def load(
    path: str | os.PathLike[str],
    environment: str | None = None,
    *,
    identity_map: IdentityMap | None = None,
) -> DocmapConfig:
    """
    Load a configuration file and make it the process-wide current configuration.
    """

    return install(DocmapConfig.from_file(path, environment=environment), identity_map)


def reset() -> None:
    global _current
    _current = None
