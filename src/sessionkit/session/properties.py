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
"""Session settings bound from ``sessionkit.session``.

Example ``sessionkit.yaml``::

    sessionkit:
      session:
        type: database        # file | memcached | database
        expires: 30           # minutes
        name: SID
        domain: example.com
        database:
          server: default     # -> sessionkit.datasources.default.url
          table: _sessions
"""

from __future__ import annotations

import tempfile
from datetime import timedelta
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator

from sessionkit.core.config import Config, config_prefix, config_properties
from sessionkit.kernel.exceptions import ConfigurationError


class EngineType(StrEnum):
    """Storage engine behind a session."""

    FILE = "file"
    CACHE = "memcached"
    DATABASE = "database"


class MemcachedProperties(BaseModel):
    address: str = "127.0.0.1"
    port: int = Field(default=11211, ge=1, le=65535)


class DatabaseProperties(BaseModel):
    server: str = "default"
    table: str = Field(default="_sessions", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    create_table: bool = False


class FileProperties(BaseModel):
    save_path: str = Field(default_factory=lambda: str(Path(tempfile.gettempdir()) / "sessionkit"))


@config_properties(prefix="sessionkit.session")
class SessionProperties(BaseModel):
    """Validated session settings.

    ``expires`` is in minutes; 0 means no explicit TTL.
    """

    type: EngineType
    expires: int = Field(default=120, ge=0)
    name: str = Field(default="SESSIONKITSID", min_length=1)
    domain: str | None = None
    memcached: MemcachedProperties = Field(default_factory=MemcachedProperties)
    database: DatabaseProperties = Field(default_factory=DatabaseProperties)
    file: FileProperties = Field(default_factory=FileProperties)

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_server_keys(cls, data: Any) -> Any:
        """Accept ``server_addr``/``server_port`` as aliases of ``memcached.address``/``memcached.port``."""
        if not isinstance(data, dict) or not ({"server_addr", "server_port"} & data.keys()):
            return data
        data = dict(data)
        memcached = dict(data.get("memcached") or {})
        if "server_addr" in data:
            memcached.setdefault("address", data.pop("server_addr"))
        if "server_port" in data:
            memcached.setdefault("port", data.pop("server_port"))
        data["memcached"] = memcached
        return data

    @property
    def cache_ttl(self) -> timedelta | None:
        """TTL of a cache entry; ``None`` when sessions do not expire."""
        if self.expires == 0:
            return None
        return timedelta(minutes=self.expires)

    @property
    def pruning_window(self) -> timedelta:
        """Age after which relational rows are purged. Defaults to 24 hours when ``expires`` is 0."""
        if self.expires == 0:
            return timedelta(hours=24)
        return timedelta(minutes=self.expires)


def load_session_properties(config: Config) -> SessionProperties:
    """Bind and validate the session settings.

    Raises:
        ConfigurationError: If the engine type is undefined or invalid, or
            any other setting fails validation.
    """
    prefix = config_prefix(SessionProperties)
    engine = config.get(f"{prefix}.type")
    if engine is None or engine == "":
        raise ConfigurationError("Undefined session type.")
    if str(engine) not in {e.value for e in EngineType}:
        raise ConfigurationError(
            "Invalid session type.",
            context={"type": engine, "allowed": [e.value for e in EngineType]},
        )
    try:
        return config.bind(SessionProperties)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
