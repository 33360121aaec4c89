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
"""Cache session backend: one cache entry per session, expiry owned by the cache."""

from __future__ import annotations

import logging
from typing import Any

from sessionkit.cache.ports.outbound import CacheAdapter
from sessionkit.session.adapters.base import CookieBoundBackend
from sessionkit.session.identifier import IdentifierIssuer
from sessionkit.session.ports.outbound import CookieJar, OpenedSession
from sessionkit.session.properties import EngineType, SessionProperties

_logger = logging.getLogger(__name__)

KEY_PREFIX = "session_"


def cache_key(identifier: str) -> str:
    return f"{KEY_PREFIX}{identifier}"


class CacheSessionBackend(CookieBoundBackend):
    """Stores the session data map under ``session_<identifier>``.

    The entry is written with a TTL of ``expires`` minutes on flush; there is
    no cleanup pass, eviction is left to the cache.
    """

    engine_type = EngineType.CACHE

    def __init__(
        self,
        cache: CacheAdapter,
        cookies: CookieJar,
        properties: SessionProperties,
        issuer: IdentifierIssuer,
        *,
        owns_cache: bool = False,
    ) -> None:
        super().__init__(cookies, properties, issuer, client=cache, owns_client=owns_cache)
        self._cache = cache

    async def open(self, identifier: str | None) -> OpenedSession:
        identifier = self._bind_identifier(identifier)
        memcached = self._properties.memcached
        self._cache.add_server(memcached.address, memcached.port)
        await self._start_client()

        stored = await self._cache.get(cache_key(identifier))
        if not stored:
            return OpenedSession(identifier)
        if not isinstance(stored, dict):
            _logger.warning("Ignoring non-mapping cache entry for session %s", identifier)
            return OpenedSession(identifier)
        return OpenedSession(identifier, dict(stored))

    async def flush(self, identifier: str, data: dict[str, Any]) -> None:
        await self._cache.put(cache_key(identifier), data, ttl=self._properties.cache_ttl)
