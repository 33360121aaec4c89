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
"""Structlog setup driven by the ``sessionkit.logging`` section.

sessionkit modules log through stdlib loggers; once configured, those records
and the structlog events of the web filter share one renderer::

    sessionkit:
      logging:
        format: json          # console | json
        level:
          root: INFO
          sessionkit.session: DEBUG
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Literal

import structlog
from pydantic import BaseModel, Field, field_validator

from sessionkit.core.config import Config, config_properties


@config_properties(prefix="sessionkit.logging")
class LoggingProperties(BaseModel):
    format: Literal["console", "json"] = "console"
    level: dict[str, str] = Field(default_factory=lambda: {"root": "INFO"})

    @field_validator("format", mode="before")
    @classmethod
    def _lower_format(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("level", mode="before")
    @classmethod
    def _known_levels(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        known = logging.getLevelNamesMapping()
        levels = {str(name): str(level).upper() for name, level in value.items()}
        unknown = sorted(level for level in levels.values() if level not in known)
        if unknown:
            raise ValueError(f"unknown log level(s): {', '.join(unknown)}")
        return levels

    @property
    def root_level(self) -> str:
        return self.level.get("root", "INFO")

    @property
    def module_levels(self) -> dict[str, str]:
        return {name: level for name, level in self.level.items() if name != "root"}


class StructlogAdapter:
    """Installs structlog processors and stdlib levels from :class:`LoggingProperties`."""

    def __init__(self, properties: LoggingProperties | None = None) -> None:
        self.properties = properties or LoggingProperties()

    @classmethod
    def from_config(cls, config: Config) -> StructlogAdapter:
        return cls(config.bind(LoggingProperties))

    def renderer(self) -> structlog.types.Processor:
        if self.properties.format == "json":
            return structlog.processors.JSONRenderer()
        return structlog.dev.ConsoleRenderer()

    def configure(self) -> None:
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                self.renderer(),
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(format="%(message)s", stream=sys.stdout, level=self.properties.root_level, force=True)
        for name, level in self.properties.module_levels.items():
            logging.getLogger(name).setLevel(level)
