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
"""Shared base for backends that bind the identifier cookie themselves."""

from __future__ import annotations

import abc
from typing import Any

from sessionkit.kernel.lifecycle import Lifecycle
from sessionkit.session.identifier import IdentifierIssuer
from sessionkit.session.ports.outbound import CookieJar, OpenedSession
from sessionkit.session.properties import EngineType, SessionProperties


class CookieBoundBackend(abc.ABC):
    """Backend that keeps the identifier in its own cookie.

    Unlike the file backend, these backends have no native session id: the
    identifier is taken from the store, the cookie, or minted, and written
    back as a session cookie on every open.
    """

    engine_type: EngineType

    def __init__(
        self,
        cookies: CookieJar,
        properties: SessionProperties,
        issuer: IdentifierIssuer,
        *,
        client: Any,
        owns_client: bool = False,
    ) -> None:
        self._cookies = cookies
        self._properties = properties
        self._issuer = issuer
        self._client = client
        self._owns_client = owns_client

    def _bind_identifier(self, identifier: str | None) -> str:
        if identifier is None:
            candidate = self._cookies.get(self._properties.name)
            identifier = candidate if self._issuer.validate(candidate) else self._issuer.generate()
        self._cookies.set(
            self._properties.name,
            identifier,
            ttl=0,
            path="/",
            domain=self._properties.domain,
            secure=False,
            http_only=False,
        )
        return identifier

    @abc.abstractmethod
    async def open(self, identifier: str | None) -> OpenedSession: ...

    @abc.abstractmethod
    async def flush(self, identifier: str, data: dict[str, Any]) -> None: ...

    def put(self, key: str, value: Any) -> None:
        pass

    def remove(self, key: str) -> None:
        pass

    def force_identifier(self, identifier: str) -> None:
        pass

    async def _start_client(self) -> None:
        """Check connectivity of a client this backend owns."""
        if self._owns_client and isinstance(self._client, Lifecycle):
            await self._client.start()

    async def close(self) -> None:
        if self._owns_client and isinstance(self._client, Lifecycle):
            await self._client.stop()
