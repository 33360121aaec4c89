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
"""Shared fixtures for session store tests."""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from sessionkit.cache.adapters.memory import InMemoryCache
from sessionkit.core.config import Config
from sessionkit.data.relational.sessions import SessionRepository
from sessionkit.session.factory import SessionBackendFactory


class FakeClock:
    """Settable clock serving both wall-clock datetimes and monotonic seconds."""

    def __init__(self, start: datetime = datetime(2026, 1, 15, 12, 0, 0)) -> None:
        self.now = start
        self._origin = start

    def __call__(self) -> datetime:
        return self.now

    def monotonic(self) -> float:
        return (self.now - self._origin).total_seconds()

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


class RecordingCache(InMemoryCache):
    """InMemoryCache that records every put."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__(clock)
        self.puts: list[tuple[str, Any, timedelta | None]] = []

    async def put(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        self.puts.append((key, value, ttl))
        await super().put(key, value, ttl)


class CountingFactory(SessionBackendFactory):
    """Factory that counts backend creations."""

    def __init__(self, config: Config, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.created = 0

    def create(self, properties, cookies, issuer):
        self.created += 1
        return super().create(properties, cookies, issuer)


@pytest.fixture
def make_config(tmp_path) -> Callable[..., Config]:
    """Build a Config with a `sessionkit.session` section; file sessions go under tmp_path."""

    def build(engine_type: str | None, **session: Any) -> Config:
        section: dict[str, Any] = {"file": {"save_path": str(tmp_path / "files")}}
        section.update(session)
        if engine_type is not None:
            section["type"] = engine_type
        return Config({"sessionkit": {"session": section}})

    return build


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_cache(clock: FakeClock) -> RecordingCache:
    return RecordingCache(clock.monotonic)


@pytest.fixture
async def repository(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'sessions.db'}")
    repo = SessionRepository(engine)
    await repo.create_schema()
    yield repo
    await engine.dispose()


@pytest.fixture
def counting_factory(recording_cache, repository, clock) -> Callable[[Config], CountingFactory]:
    """Factory builder with every engine wired to test doubles."""

    def build(config: Config) -> CountingFactory:
        return CountingFactory(
            config,
            cache=recording_cache,
            repository=repository,
            clock=clock,
        )

    return build
