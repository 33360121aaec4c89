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
"""Builds the session backend for a configured engine type."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import create_async_engine

from sessionkit.cache.ports.outbound import CacheAdapter
from sessionkit.core.config import Config
from sessionkit.data.relational.sessions import SessionRepository
from sessionkit.kernel.exceptions import ConfigurationError
from sessionkit.session.adapters.cache import CacheSessionBackend
from sessionkit.session.adapters.database import DatabaseSessionBackend, utcnow
from sessionkit.session.adapters.file import FileSessionBackend
from sessionkit.session.adapters.native import FileNativeSession
from sessionkit.session.identifier import IdentifierIssuer
from sessionkit.session.ports.outbound import CookieJar, NativeSession, SessionBackend
from sessionkit.session.properties import EngineType, SessionProperties

_logger = logging.getLogger(__name__)

DEFAULT_DATASOURCE_URL = "sqlite+aiosqlite:///./sessions.db"


class SessionBackendFactory:
    """Creates one backend per session store.

    Clients passed in are shared and never closed by the stores; clients
    built here from configuration are owned by the backend that uses them.

    Args:
        config: Source of datasource URLs.
        cache: Cache adapter for the ``memcached`` engine.
        repository: Session repository for the ``database`` engine.
        native_session: Builds the native session for the ``file`` engine
            from the request's cookie jar.
        clock: Timestamp source for the ``database`` engine.
    """

    def __init__(
        self,
        config: Config,
        *,
        cache: CacheAdapter | None = None,
        repository: SessionRepository | None = None,
        native_session: Callable[[CookieJar, SessionProperties], NativeSession] | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._config = config
        self._cache = cache
        self._repository = repository
        self._native_session = native_session
        self._clock = clock
        self._builders: dict[
            EngineType, Callable[[SessionProperties, CookieJar, IdentifierIssuer], SessionBackend]
        ] = {
            EngineType.FILE: self._file_backend,
            EngineType.CACHE: self._cache_backend,
            EngineType.DATABASE: self._database_backend,
        }

    def create(self, properties: SessionProperties, cookies: CookieJar, issuer: IdentifierIssuer) -> SessionBackend:
        return self._builders[properties.type](properties, cookies, issuer)

    def _file_backend(
        self, properties: SessionProperties, cookies: CookieJar, issuer: IdentifierIssuer
    ) -> SessionBackend:
        if self._native_session is not None:
            native = self._native_session(cookies, properties)
        else:
            native = FileNativeSession(cookies, properties.file.save_path, issuer, name=properties.name)
        return FileSessionBackend(native, properties)

    def _cache_backend(
        self, properties: SessionProperties, cookies: CookieJar, issuer: IdentifierIssuer
    ) -> SessionBackend:
        if self._cache is not None:
            return CacheSessionBackend(self._cache, cookies, properties, issuer)

        from sessionkit.cache.adapters.redis import RedisCacheAdapter

        return CacheSessionBackend(RedisCacheAdapter(), cookies, properties, issuer, owns_cache=True)

    def _database_backend(
        self, properties: SessionProperties, cookies: CookieJar, issuer: IdentifierIssuer
    ) -> SessionBackend:
        if self._repository is not None:
            return DatabaseSessionBackend(self._repository, cookies, properties, issuer, clock=self._clock)

        url = self.datasource_url(properties.database.server)
        repository = SessionRepository(
            create_async_engine(url),
            properties.database.table,
            dispose_on_stop=True,
        )
        return DatabaseSessionBackend(
            repository, cookies, properties, issuer, clock=self._clock, owns_repository=True
        )

    def datasource_url(self, server: str) -> str:
        """Resolve ``sessionkit.datasources.<server>.url``.

        Raises:
            ConfigurationError: If a non-default datasource is not configured.
        """
        url = self._config.get(f"sessionkit.datasources.{server}.url")
        if url:
            return str(url)
        if server == "default":
            _logger.debug("No default datasource configured, using %s", DEFAULT_DATASOURCE_URL)
            return DEFAULT_DATASOURCE_URL
        raise ConfigurationError(f"Undefined datasource '{server}'.", context={"server": server})
