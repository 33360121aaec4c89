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
"""sessionkit settings: library defaults, one project file, SESSIONKIT_* overrides.

A project keeps its settings in ``sessionkit.yaml`` (or ``sessionkit.toml``)::

    sessionkit:
      session:
        type: database
      datasources:
        default:
          url: postgresql+asyncpg://app@db/app

Any single key can be overridden from the environment by upper-casing its
dotted path: ``sessionkit.session.type`` -> ``SESSIONKIT_SESSION_TYPE``.
"""

from __future__ import annotations

import importlib.resources
import os
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from sessionkit.kernel.exceptions import ConfigurationError

M = TypeVar("M", bound=BaseModel)

LIBRARY_DEFAULTS = "sessionkit-defaults.yaml (library defaults)"

PROJECT_FILES = ("sessionkit.yaml", "sessionkit.yml", "sessionkit.toml")

_PREFIX_ATTR = "__sessionkit_config_prefix__"

_ENV_PREFIX = "SESSIONKIT_"


def config_properties(prefix: str) -> Callable[[type[M]], type[M]]:
    """Attach a pydantic settings model to the config section at *prefix*.

    Usage:
        @config_properties(prefix="sessionkit.session")
        class SessionProperties(BaseModel):
            type: EngineType
            expires: int = Field(default=120, ge=0)
    """

    def decorator(cls: type[M]) -> type[M]:
        setattr(cls, _PREFIX_ATTR, prefix)
        return cls

    return decorator


def config_prefix(model: type) -> str | None:
    return getattr(model, _PREFIX_ATTR, None)


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML or TOML settings file into a dict (empty files give ``{}``)."""
    if path.suffix == ".toml":
        with open(path, "rb") as f:
            return tomllib.load(f)
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def library_defaults() -> dict[str, Any]:
    resource = importlib.resources.files("sessionkit.resources").joinpath("sessionkit-defaults.yaml")
    return yaml.safe_load(resource.read_text(encoding="utf-8")) or {}


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        merged[key] = _merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


class Config:
    """Nested settings read by dotted key; the environment wins over file values.

    Args:
        data: Settings tree, normally rooted at ``sessionkit``.
        sources: Human-readable description of where *data* came from.
    """

    def __init__(self, data: dict[str, Any] | None = None, sources: list[str] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._sources = list(sources or [])

    @property
    def loaded_sources(self) -> list[str]:
        return list(self._sources)

    @classmethod
    def load(cls, location: str | Path | None = None, *, load_defaults: bool = True) -> Config:
        """Build a Config from the library defaults and a project file.

        *location* is either a settings file or a directory searched for
        ``sessionkit.yaml``, ``sessionkit.yml`` and ``sessionkit.toml`` (every
        one found is merged, in that order).

        Raises:
            ConfigurationError: If *location* does not exist.
        """
        data: dict[str, Any] = {}
        sources: list[str] = []
        if load_defaults:
            data = library_defaults()
            sources.append(LIBRARY_DEFAULTS)

        if location is not None:
            path = Path(location)
            if path.is_dir():
                files = [path / name for name in PROJECT_FILES if (path / name).is_file()]
            elif path.is_file():
                files = [path]
            else:
                raise ConfigurationError(f"Config file '{path}' not found.", context={"path": str(path)})
            for file in files:
                data = _merge(data, read_config_file(file))
                sources.append(str(file))

        return cls(data, sources)

    @staticmethod
    def env_key(key: str) -> str:
        """``sessionkit.session.type`` -> ``SESSIONKIT_SESSION_TYPE``."""
        path = key.removeprefix("sessionkit.")
        return _ENV_PREFIX + path.upper().replace(".", "_").replace("-", "_")

    def get(self, key: str, default: Any = None) -> Any:
        override = os.environ.get(self.env_key(key))
        if override is not None:
            return override
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Return the sub-tree at *prefix*, or ``{}`` when absent (no env overlay)."""
        node = self._data
        for part in prefix.split("."):
            node = node.get(part) if isinstance(node, dict) else None
        return node if isinstance(node, dict) else {}

    def bind(self, model: type[M]) -> M:
        """Validate the section of a ``@config_properties`` model into an instance.

        Top-level fields can be overridden from the environment.

        Raises:
            ValueError: If the model is not decorated or validation fails.
        """
        prefix = config_prefix(model)
        if prefix is None:
            raise ValueError(f"{model.__name__} is not decorated with @config_properties")

        section = dict(self.get_section(prefix))
        for name in model.model_fields:
            override = os.environ.get(self.env_key(f"{prefix}.{name}"))
            if override is not None:
                section[name] = override
        try:
            return model.model_validate(section)
        except ValidationError as exc:
            raise ValueError(f"Invalid settings for '{model.__name__}' under '{prefix}':\n{exc}") from exc
