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
"""SessionStore — lazily started key/value session state over a pluggable backend."""

from __future__ import annotations

import json
import logging
from types import TracebackType
from typing import Any

from sessionkit.core.config import Config
from sessionkit.kernel.exceptions import InvalidSessionValueError
from sessionkit.session.factory import SessionBackendFactory
from sessionkit.session.hooks import ShutdownHooks
from sessionkit.session.identifier import IdentifierIssuer
from sessionkit.session.ports.outbound import CookieJar, SessionBackend
from sessionkit.session.properties import EngineType, SessionProperties, load_session_properties

_logger = logging.getLogger(__name__)


class SessionStore:
    """Session state for one request scope.

    Every accessor starts the store on first use: settings are loaded, the
    identifier is read from the cookie (or replaced when malformed), and the
    configured backend loads the stored data. Reads and writes then only touch
    the in-memory snapshot; the snapshot is written back once, by the flush
    deferred to :meth:`close`.

    Use it as an async context manager so the flush runs on every exit path::

        async with SessionStore(config, cookies) as session:
            await session.set("user", 42)

    Args:
        config: Settings source (``sessionkit.session``).
        cookies: The request's cookie jar.
        backend_factory: Builds the backend for the configured engine type.
        issuer: Mints and validates identifiers.
    """

    def __init__(
        self,
        config: Config,
        cookies: CookieJar,
        *,
        backend_factory: SessionBackendFactory | None = None,
        issuer: IdentifierIssuer | None = None,
    ) -> None:
        self._config = config
        self._cookies = cookies
        self._backend_factory = backend_factory or SessionBackendFactory(config)
        self._issuer = issuer or IdentifierIssuer()
        self._hooks = ShutdownHooks()
        self._properties: SessionProperties | None = None
        self._backend: SessionBackend | None = None
        self._identifier: str | None = None
        self._data: dict[str, Any] = {}
        self._started = False
        self._closed = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def started(self) -> bool:
        return self._started

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def properties(self) -> SessionProperties | None:
        return self._properties

    @property
    def engine_type(self) -> EngineType | None:
        return self._properties.type if self._properties is not None else None

    @property
    def cookie_name(self) -> str | None:
        return self._properties.name if self._properties is not None else None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, name: str | None = None) -> bool:
        """Start the session. Returns ``True``; a started store is left untouched.

        Args:
            name: Cookie name overriding ``sessionkit.session.name``.

        Raises:
            ConfigurationError: If the session type is undefined or invalid.
            BackendUnavailableError: If the backend cannot load the session.
        """
        if self._started:
            return True
        self._ensure_open()

        properties = load_session_properties(self._config)
        if name is not None:
            properties = properties.model_copy(update={"name": name})

        presented = self._cookies.get(properties.name)
        if presented:
            if self._identifier is None and not self._issuer.validate(presented):
                _logger.warning("Replacing malformed session identifier from cookie '%s'", properties.name)
                self._identifier = self._issuer.generate()
        else:
            self._cookies.delete(properties.name)

        backend = self._backend_factory.create(properties, self._cookies, self._issuer)
        try:
            opened = await backend.open(self._identifier)
        except BaseException:
            await backend.close()
            raise

        self._properties = properties
        self._backend = backend
        self._identifier = opened.identifier
        self._data = opened.data
        self._hooks.register(self._flush)
        self._started = True
        _logger.debug("Started %s session %s", properties.type.value, self._identifier)
        return True

    async def save(self) -> None:
        """Write the session data to the backend now.

        Raises:
            BackendUnavailableError: If the backend rejects the write.
        """
        await self.start()
        await self._flush()

    async def _flush(self) -> None:
        assert self._backend is not None and self._identifier is not None
        await self._backend.flush(self._identifier, dict(self._data))

    async def close(self) -> None:
        """Run the deferred flush (once, best effort) and release owned clients."""
        if self._closed:
            return
        self._closed = True
        await self._hooks.run()
        if self._backend is not None:
            try:
                await self._backend.close()
            except Exception as exc:
                _logger.warning("Failed to release session backend: %s", exc)

    async def __aenter__(self) -> SessionStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------

    async def is_set(self, key: str) -> bool:
        await self.start()
        return key in self._data

    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*.

        The value is kept as its JSON form reads back, so a tuple is stored
        as a list whichever engine holds the session.

        Raises:
            InvalidSessionValueError: If *key* is not a string or *value*
                cannot be encoded as JSON.
            RuntimeError: If the store is closed.
        """
        await self.start()
        self._ensure_open()
        assert self._backend is not None
        value = _json_value(key, value)
        self._data[key] = value
        self._backend.put(key, value)

    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None`` if absent."""
        await self.start()
        return self._data.get(key)

    async def get_all(self) -> dict[str, Any] | None:
        """Return a copy of all session data, or ``None`` when the session is empty."""
        await self.start()
        if not self._data:
            return None
        return dict(self._data)

    async def get_id(self) -> str:
        await self.start()
        assert self._identifier is not None
        return self._identifier

    async def unregister(self, key: str) -> None:
        """Remove *key*; absent keys are ignored."""
        await self.start()
        self._ensure_open()
        assert self._backend is not None
        self._data.pop(key, None)
        self._backend.remove(key)

    def set_identifier(self, identifier: str) -> None:
        """Force the session identifier.

        Before start, the identifier is used instead of the cookie's. After
        start, backends with a native session id are pointed at it too.

        Raises:
            ValueError: If *identifier* is not a well-formed identifier.
        """
        if not self._issuer.validate(identifier):
            raise ValueError(f"Invalid session identifier {identifier!r}")
        self._identifier = identifier
        if self._backend is not None and self._backend.engine_type is not EngineType.DATABASE:
            self._backend.force_identifier(identifier)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Session store is closed")


def _json_value(key: Any, value: Any) -> Any:
    if not isinstance(key, str):
        raise InvalidSessionValueError(f"Session key {key!r} is not a string", key=repr(key))
    try:
        return json.loads(json.dumps(value))
    except (TypeError, ValueError) as exc:
        raise InvalidSessionValueError(f"Session value for {key!r} is not JSON-serializable: {exc}", key=key) from exc
