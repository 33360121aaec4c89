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
"""File session backend: the store's data lives inside a native file session."""

from __future__ import annotations

from typing import Any

from sessionkit.session.ports.outbound import NativeSession, OpenedSession
from sessionkit.session.properties import EngineType, SessionProperties

PARTITION_KEY = "_sessionkit_"


class FileSessionBackend:
    """Layers the session data map under :data:`PARTITION_KEY` of a native session.

    The native mechanism owns the identifier, the cookie and persistence;
    writes are mirrored into its partition as they happen, and flushing
    commits the native session.
    """

    engine_type = EngineType.FILE

    def __init__(self, native: NativeSession, properties: SessionProperties) -> None:
        self._native = native
        self._properties = properties

    async def open(self, identifier: str | None) -> OpenedSession:
        self._native.name = self._properties.name
        self._native.set_cookie_params(
            lifetime=0,
            path="/",
            domain=self._properties.domain,
            secure=False,
            http_only=False,
        )
        if identifier is not None:
            self._native.session_id = identifier
        await self._native.start()

        partition = self._native.data.get(PARTITION_KEY)
        data = dict(partition) if isinstance(partition, dict) else {}
        return OpenedSession(self._native.session_id or "", data)

    def put(self, key: str, value: Any) -> None:
        partition = self._native.data.get(PARTITION_KEY)
        if not isinstance(partition, dict):
            partition = self._native.data[PARTITION_KEY] = {}
        partition[key] = value

    def remove(self, key: str) -> None:
        partition = self._native.data.get(PARTITION_KEY)
        if isinstance(partition, dict):
            partition.pop(key, None)

    def force_identifier(self, identifier: str) -> None:
        self._native.session_id = identifier

    async def flush(self, identifier: str, data: dict[str, Any]) -> None:
        await self._native.commit()

    async def close(self) -> None:
        pass
