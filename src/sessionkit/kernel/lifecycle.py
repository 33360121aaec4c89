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
"""Unified lifecycle protocol for storage clients.

Clients that own connections or pools (the Redis cache adapter, the
SQLAlchemy session repository) implement this protocol. A session store
calls stop() on the clients it created once its deferred flush has run.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Lifecycle(Protocol):
    """Standard lifecycle for storage clients."""

    async def start(self) -> None:
        """Validate connectivity.

        If the connection fails, raise BackendUnavailableError.
        """
        ...

    async def stop(self) -> None:
        """Release connections and clean up resources.

        Best-effort cleanup -- exceptions are logged by the caller.
        """
        ...
