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
"""Outbound ports of the session store: cookies, native sessions, backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from sessionkit.session.properties import EngineType


@runtime_checkable
class CookieJar(Protocol):
    """Read/write access to the client's cookies for one request."""

    def get(self, name: str) -> str | None: ...

    def set(
        self,
        name: str,
        value: str,
        ttl: int = 0,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        http_only: bool = False,
    ) -> None: ...

    def delete(self, name: str) -> None: ...


@runtime_checkable
class NativeSession(Protocol):
    """A cookie-transported, server-side session mechanism with its own storage.

    ``data`` is the mechanism's whole session document; ``commit`` persists it.
    """

    name: str
    session_id: str | None
    data: dict[str, Any]

    def set_cookie_params(
        self,
        lifetime: int = 0,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        http_only: bool = False,
    ) -> None: ...

    async def start(self) -> None: ...

    async def commit(self) -> None: ...


@dataclass
class OpenedSession:
    """Identifier and data a backend resolved when it was opened."""

    identifier: str
    data: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class SessionBackend(Protocol):
    """Storage engine behind a :class:`~sessionkit.session.store.SessionStore`."""

    engine_type: EngineType

    async def open(self, identifier: str | None) -> OpenedSession:
        """Resolve the identifier (minting one if needed) and load its data."""
        ...

    def put(self, key: str, value: Any) -> None:
        """Mirror a write into backend-native state, if the backend keeps any."""
        ...

    def remove(self, key: str) -> None:
        """Mirror a removal into backend-native state, if the backend keeps any."""
        ...

    def force_identifier(self, identifier: str) -> None:
        """Point backend-native state at *identifier*."""
        ...

    async def flush(self, identifier: str, data: dict[str, Any]) -> None:
        """Persist *data* under *identifier*."""
        ...

    async def close(self) -> None:
        """Release clients this backend owns."""
        ...
