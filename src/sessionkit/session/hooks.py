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
"""Deferred callbacks run once when a session scope ends."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)

ShutdownCallback = Callable[[], Awaitable[None]]


class ShutdownHooks:
    """Callbacks deferred to the end of a session scope.

    :meth:`run` invokes each registered callback once, in registration
    order. Failures are logged and do not stop the remaining callbacks:
    a lost write is acceptable, a failed shutdown is not.
    """

    def __init__(self) -> None:
        self._callbacks: list[ShutdownCallback] = []
        self._ran = False

    def register(self, callback: ShutdownCallback) -> None:
        if self._ran:
            raise RuntimeError("Shutdown hooks already ran")
        self._callbacks.append(callback)

    @property
    def pending(self) -> int:
        return 0 if self._ran else len(self._callbacks)

    @property
    def ran(self) -> bool:
        return self._ran

    async def run(self) -> None:
        if self._ran:
            return
        self._ran = True
        for callback in self._callbacks:
            try:
                await callback()
            except Exception:
                _logger.exception("Deferred session callback %r failed", getattr(callback, "__qualname__", callback))
