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
"""SessionFilter — opens a SessionStore per HTTP request and flushes it afterwards."""

from __future__ import annotations

from collections.abc import Sequence
from fnmatch import fnmatch
from typing import Any

import structlog

from sessionkit.core.config import Config
from sessionkit.session.cookies import RequestCookieJar
from sessionkit.session.factory import SessionBackendFactory
from sessionkit.session.store import SessionStore
from sessionkit.web.ports.filter import CallNext

logger = structlog.get_logger("sessionkit.web")


class SessionFilter:
    """Attaches a lazily started :class:`SessionStore` to ``request.state.session``.

    The store is closed in a ``finally`` block, so its deferred flush runs
    exactly once whether the handler returns or raises. Cookie writes made
    by the store are copied onto the response afterwards.

    Args:
        config: Settings source for every store.
        backend_factory: Shared by the stores of all requests.
        exclude_paths: Glob patterns (``/static/*``) of paths served without a session.
    """

    def __init__(
        self,
        config: Config,
        *,
        backend_factory: SessionBackendFactory | None = None,
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self._config = config
        self._backend_factory = backend_factory or SessionBackendFactory(config)
        self.exclude_paths = tuple(exclude_paths)

    def should_not_filter(self, request: Any) -> bool:
        path: str = request.url.path
        return any(fnmatch(path, pattern) for pattern in self.exclude_paths)

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        cookies = RequestCookieJar(getattr(request, "cookies", {}))
        session = SessionStore(self._config, cookies, backend_factory=self._backend_factory)
        request.state.session = session

        try:
            response = await call_next(request)
        finally:
            await session.close()

        if session.started:
            logger.debug("session_flushed", engine=str(session.engine_type), path=request.url.path)
        cookies.apply(response)
        return response
