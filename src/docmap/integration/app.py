"""
Boot-time integration of docmap into a host web application.
"""

from __future__ import annotations

import importlib
import os
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional

from .. import config as docmap_config
from ..errors import RESCUE_RESPONSES, ConfigurationError
from ..hooks import AFTER_INITIALIZE, CLEANUP, PREPARE, LifecycleDispatcher, lifecycle
from ..identity import IdentityMap, identity_map as default_identity_map
from ..middleware import AsgiIdentityMapMiddleware, IdentityMapMiddleware
from ..utils import get_logger

DEFAULT_CONFIG_PATH = os.path.join("config", "docmap.toml")


class Integration:
    """
    Hooks docmap into a web application's boot and reload lifecycle.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        *,
        environment: str = "development",
        config_path: str | os.PathLike[str] = DEFAULT_CONFIG_PATH,
        identity_map: Optional[IdentityMap] = None,
        dispatcher: Optional[LifecycleDispatcher] = None,
    ) -> None:
        self.root = Path(root)
        self.environment = environment
        self.config_path = self.root / config_path
        self.identity_map = identity_map if identity_map is not None else default_identity_map
        self.dispatcher = dispatcher if dispatcher is not None else lifecycle
        self.config: docmap_config.DocmapConfig | None = None
        self.preloaded: List[str] = []
        self._initialized = False
        self._hooks_registered = False
        self.logger = get_logger("integration")

    @classmethod
    def rescue_responses(cls) -> Dict[str, int]:
        """
        Mapping of docmap exceptions to the HTTP statuses they should render as.
        """

        return dict(RESCUE_RESPONSES)

    # ------------------------------------------------------------------ #
    # Initializers
    # ------------------------------------------------------------------ #
    def load_config(self) -> docmap_config.DocmapConfig | None:
        if not self.config_path.is_file():
            self.logger.debug("No docmap configuration at %s", self.config_path)
            return None
        try:
            self.config = docmap_config.load(
                self.config_path, self.environment, identity_map=self.identity_map
            )
        except ConfigurationError as exc:
            self.handle_configuration_error(exc)
        return self.config

    def handle_configuration_error(self, exc: ConfigurationError) -> None:
        # Boot continues so generators and consoles work before a config exists.
        self.logger.error("There is a configuration error with the current docmap config.")
        self.logger.error("%s", exc)

    def preload_models(self, **_context: Any) -> List[str]:
        """
        Import every configured model module so document class hierarchies are complete.
        """

        if self.config is None or not self.config.preload_models:
            return []
        for module_name in self.config.models:
            importlib.import_module(module_name)
            if module_name not in self.preloaded:
                self.preloaded.append(module_name)
        self.logger.debug("Preloaded %s model module(s)", len(self.config.models))
        return list(self.config.models)

    def clear_identity_map(self, **_context: Any) -> None:
        self.identity_map.clear()

    def wrap_wsgi(self, app, **kwargs: Any) -> IdentityMapMiddleware:
        return IdentityMapMiddleware(app, self.identity_map, **kwargs)

    def wrap_asgi(self, app, **kwargs: Any) -> AsgiIdentityMapMiddleware:
        return AsgiIdentityMapMiddleware(app, self.identity_map, **kwargs)

    def initialize(self, rescue_responses: Optional[MutableMapping[str, int]] = None) -> "Integration":
        """
        Run the boot initializers once, in order.
        """

        if self._initialized:
            return self
        self.load_config()
        if rescue_responses is not None:
            rescue_responses.update(self.rescue_responses())
        if not self._hooks_registered:
            self.dispatcher.register(PREPARE, self.preload_models)
            # Identity map storage is per execution context, so clearing is safe in every environment.
            self.dispatcher.register(CLEANUP, self.clear_identity_map)
            self._hooks_registered = True
        self.dispatcher.fire(PREPARE, integration=self)
        self.dispatcher.fire(AFTER_INITIALIZE, integration=self)
        self._initialized = True
        self.logger.info("docmap initialized for %s environment", self.environment)
        return self
