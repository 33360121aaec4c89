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
"""Process-local cache adapter for development and tests."""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any


class InMemoryCache:
    """Session entries kept in a dict, each with an optional deadline.

    Servers passed to :meth:`add_server` are only recorded. *clock* returns
    monotonic seconds and can be replaced to drive expiry in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, tuple[Any, float | None]] = {}
        self._clock = clock
        self.servers: list[tuple[str, int]] = []

    def add_server(self, address: str, port: int) -> None:
        if (address, port) not in self.servers:
            self.servers.append((address, port))

    async def get(self, key: str) -> Any | None:
        """Return the live value for *key*; an expired entry is dropped on read."""
        value, deadline = self._entries.get(key, (None, None))
        if deadline is not None and self._clock() >= deadline:
            del self._entries[key]
            return None
        return value

    async def put(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Replace the entry for *key*; *ttl* counts from now on the cache clock."""
        deadline = None if ttl is None else self._clock() + ttl.total_seconds()
        self._entries[key] = (value, deadline)
