# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Application bootstrap — wires configuration, logging and session handling."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import structlog

from sessionkit.core.config import Config
from sessionkit.kernel.exceptions import ConfigurationError
from sessionkit.logging.structlog_adapter import StructlogAdapter
from sessionkit.session.cookies import RequestCookieJar
from sessionkit.session.factory import SessionBackendFactory
from sessionkit.session.filter import SessionFilter
from sessionkit.session.ports.outbound import CookieJar
from sessionkit.session.store import SessionStore
from sessionkit.web.adapters.starlette.filter_chain import WebFilterChainMiddleware


class SessionKitApplication:
    """Entry point for applications using sessionkit.

    Startup sequence:
    1. Load configuration (given ``Config``, a settings file or directory, or library defaults)
    2. Configure logging from the ``sessionkit.logging`` section
    3. Build the backend factory shared by every session

    Args:
        config: Ready-made configuration. Takes precedence over *config_path*.
        config_path: A YAML/TOML settings file, or a directory holding ``sessionkit.yaml``.
        backend_factory: Replaces the factory built from configuration.

    Raises:
        ConfigurationError: If the settings file is missing or the logging section is invalid.
    """

    def __init__(
        self,
        config: Config | None = None,
        config_path: str | Path | None = None,
        backend_factory: SessionBackendFactory | None = None,
    ) -> None:
        self.config = config if config is not None else Config.load(config_path)

        try:
            StructlogAdapter.from_config(self.config).configure()
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        self._logger = structlog.get_logger("sessionkit.core")

        self.backend_factory = backend_factory or SessionBackendFactory(self.config)
        self._logger.info(
            "sessionkit_configured",
            sources=self.config.loaded_sources,
            session_type=self.config.get("sessionkit.session.type"),
        )

    def open_session(self, cookies: CookieJar | Mapping[str, str] | None = None) -> SessionStore:
        """Create a session store for one request or job.

        Plain cookie mappings are wrapped in a :class:`RequestCookieJar`.
        """
        if cookies is None or not isinstance(cookies, CookieJar):
            cookies = RequestCookieJar(cookies)
        return SessionStore(self.config, cookies, backend_factory=self.backend_factory)

    def session_filter(self, exclude_paths: Sequence[str] = ()) -> SessionFilter:
        return SessionFilter(self.config, backend_factory=self.backend_factory, exclude_paths=exclude_paths)

    def wrap(self, app: Any, exclude_paths: Sequence[str] = ()) -> WebFilterChainMiddleware:
        """Wrap an ASGI app so every HTTP request gets ``request.state.session``.

        Requests whose path matches one of the *exclude_paths* globs get no session.
        """
        return WebFilterChainMiddleware(app, filters=[self.session_filter(exclude_paths)])
