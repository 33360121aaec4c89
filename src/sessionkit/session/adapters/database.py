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
"""Relational session backend: one row per session, stale rows pruned on open."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sessionkit.data.relational.sessions import SessionRepository
from sessionkit.session.adapters.base import CookieBoundBackend
from sessionkit.session.identifier import IdentifierIssuer
from sessionkit.session.ports.outbound import CookieJar, OpenedSession
from sessionkit.session.properties import EngineType, SessionProperties

_logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in ``updated_at``."""
    return datetime.now(UTC).replace(tzinfo=None)


class DatabaseSessionBackend(CookieBoundBackend):
    """Keeps each session as a JSON document in the session table.

    No row lock is held between the load on open and the update on flush:
    concurrent requests for one identifier are last-writer-wins.
    """

    engine_type = EngineType.DATABASE

    def __init__(
        self,
        repository: SessionRepository,
        cookies: CookieJar,
        properties: SessionProperties,
        issuer: IdentifierIssuer,
        *,
        clock: Callable[[], datetime] = utcnow,
        owns_repository: bool = False,
    ) -> None:
        super().__init__(cookies, properties, issuer, client=repository, owns_client=owns_repository)
        self._repository = repository
        self._clock = clock

    async def open(self, identifier: str | None) -> OpenedSession:
        identifier = self._bind_identifier(identifier)
        await self._start_client()
        if self._properties.database.create_table:
            await self._repository.create_schema()

        now = self._clock()
        purged = await self._repository.purge_expired(now - self._properties.pruning_window)
        if purged:
            _logger.debug("Purged %d expired session rows", purged)

        row = await self._repository.find(identifier)
        if row is None:
            await self._repository.insert_placeholder(identifier, now)
            return OpenedSession(identifier)
        return OpenedSession(identifier, self._deserialize(identifier, row.value))

    async def flush(self, identifier: str, data: dict[str, Any]) -> None:
        affected = await self._repository.update_value(identifier, json.dumps(data), self._clock())
        if affected == 0:
            # Row purged or identifier rotated by another request.
            _logger.info("Session %s no longer stored, update dropped", identifier)

    @staticmethod
    def _deserialize(identifier: str, value: str | None) -> dict[str, Any]:
        if value is None:
            return {}
        try:
            data = json.loads(value)
        except json.JSONDecodeError:
            _logger.warning("Failed to deserialize session '%s'", identifier)
            return {}
        if not isinstance(data, dict):
            _logger.warning("Ignoring non-mapping value stored for session '%s'", identifier)
            return {}
        return data
