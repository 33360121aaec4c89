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
"""Cache adapter over redis.asyncio, the client behind the ``memcached`` engine."""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from sessionkit.kernel.exceptions import BackendUnavailableError

_logger = logging.getLogger(__name__)

_BACKEND = "cache"


class RedisCacheAdapter:
    """Stores JSON documents in Redis under the session key.

    The client is either injected (any ``redis.asyncio.Redis``-like object)
    or built by :meth:`add_server`. Connection and protocol failures surface
    as :class:`BackendUnavailableError`.
    """

    def __init__(self, client: Any | None = None) -> None:
        self._client = client

    def add_server(self, address: str, port: int) -> None:
        """Connect to the cache server at *address*:*port*.

        The first registered server wins; an injected client is kept as is.
        """
        if self._client is not None:
            _logger.debug("Cache client already bound, ignoring server %s:%s", address, port)
            return
        self._client = aioredis.Redis(host=address, port=int(port))

    @property
    def client(self) -> Any:
        if self._client is None:
            raise BackendUnavailableError("No cache server registered", backend=_BACKEND)
        return self._client

    async def get(self, key: str) -> Any | None:
        """Return the decoded document, or ``None`` when absent or undecodable."""
        try:
            raw = await self.client.get(key)
        except (RedisError, OSError) as exc:
            raise BackendUnavailableError(f"Cache read failed for key '{key}': {exc}", backend=_BACKEND) from exc
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (ValueError, TypeError):
            _logger.warning("Undecodable cache entry under '%s', treating as missing", key)
            return None

    async def put(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Write *value* as JSON, expiring after *ttl* (whole seconds) when given."""
        payload = json.dumps(value).encode()
        seconds = None if ttl is None else int(ttl.total_seconds())
        try:
            await self.client.set(key, payload, ex=seconds)
        except (RedisError, OSError) as exc:
            raise BackendUnavailableError(f"Cache write failed for key '{key}': {exc}", backend=_BACKEND) from exc

    async def start(self) -> None:
        """Validate connectivity by pinging the server."""
        try:
            await self.client.ping()
        except (RedisError, OSError) as exc:
            raise BackendUnavailableError(f"Cache server unreachable: {exc}", backend=_BACKEND) from exc

    async def stop(self) -> None:
        """Close the underlying connection."""
        if self._client is not None:
            await self._client.aclose()
