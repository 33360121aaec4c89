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
"""Tests for the relational session backend."""

from __future__ import annotations

import json
import logging
from datetime import timedelta

import pytest
from sqlalchemy import insert, select

from sessionkit.kernel.exceptions import BackendUnavailableError, ConfigurationError
from sessionkit.session.cookies import RequestCookieJar
from sessionkit.session.factory import SessionBackendFactory
from sessionkit.session.store import SessionStore


async def _rows(repository) -> dict:
    table = repository.table
    async with repository._engine.connect() as conn:
        result = await conn.execute(select(table.c.id, table.c.session_value, table.c.updated_at))
        return {row.id: (row.session_value, row.updated_at) for row in result}


async def _insert(repository, identifier, value, updated_at) -> None:
    async with repository._engine.begin() as conn:
        await conn.execute(
            insert(repository.table).values(id=identifier, session_value=value, updated_at=updated_at)
        )


@pytest.fixture
def database_factory(repository, clock, make_config):
    def build(**session):
        config = make_config("database", **session)
        return config, SessionBackendFactory(config, repository=repository, clock=clock)

    return build


class TestNewSession:
    @pytest.mark.asyncio
    async def test_new_session_inserts_placeholder_and_flushes_value(self, repository, database_factory, clock):
        config, factory = database_factory(expires=30, name="SID")
        cookies = RequestCookieJar()
        store = SessionStore(config, cookies, backend_factory=factory)

        assert await store.start() is True
        identifier = await store.get_id()
        assert cookies.get("SID") == identifier

        rows = await _rows(repository)
        assert rows[identifier] == (None, clock.now)
        assert await store.get_all() is None

        await store.set("user", 42)
        clock.advance(seconds=5)
        await store.close()

        value, updated_at = (await _rows(repository))[identifier]
        assert json.loads(value) == {"user": 42}
        assert updated_at == clock.now

    @pytest.mark.asyncio
    async def test_existing_row_is_loaded(self, repository, database_factory, clock):
        await _insert(repository, "known-session", json.dumps({"cart": [1, 2]}), clock.now)
        config, factory = database_factory(name="SID")

        async with SessionStore(config, RequestCookieJar({"SID": "known-session"}), backend_factory=factory) as store:
            assert await store.get("cart") == [1, 2]
            await store.set("cart", [1, 2, 3])

        value, _ = (await _rows(repository))["known-session"]
        assert json.loads(value) == {"cart": [1, 2, 3]}

    @pytest.mark.asyncio
    async def test_null_value_loads_empty(self, repository, database_factory, clock):
        await _insert(repository, "empty-session", None, clock.now)
        config, factory = database_factory(name="SID")

        async with SessionStore(config, RequestCookieJar({"SID": "empty-session"}), backend_factory=factory) as store:
            assert await store.get_all() is None

    @pytest.mark.asyncio
    async def test_corrupt_value_loads_empty(self, repository, database_factory, clock):
        await _insert(repository, "corrupt-session", "a:1:{s:4:", clock.now)
        config, factory = database_factory(name="SID")

        async with SessionStore(config, RequestCookieJar({"SID": "corrupt-session"}), backend_factory=factory) as store:
            assert await store.get_all() is None


class TestPruning:
    @pytest.mark.asyncio
    async def test_any_session_start_purges_stale_rows(self, repository, database_factory, clock):
        await _insert(repository, "stale", json.dumps({"a": 1}), clock.now - timedelta(minutes=31))
        await _insert(repository, "boundary", json.dumps({"a": 1}), clock.now - timedelta(minutes=30))
        await _insert(repository, "fresh", json.dumps({"a": 1}), clock.now - timedelta(minutes=5))
        config, factory = database_factory(expires=30, name="SID")

        async with SessionStore(config, RequestCookieJar({"SID": "someone-else"}), backend_factory=factory) as store:
            await store.start()

        rows = await _rows(repository)
        assert "stale" not in rows
        assert "boundary" not in rows
        assert "fresh" in rows
        assert "someone-else" in rows

    @pytest.mark.asyncio
    async def test_zero_expiry_prunes_after_a_day(self, repository, database_factory, clock):
        await _insert(repository, "day-old", None, clock.now - timedelta(hours=25))
        await _insert(repository, "hours-old", None, clock.now - timedelta(hours=23))
        config, factory = database_factory(expires=0)

        async with SessionStore(config, RequestCookieJar(), backend_factory=factory) as store:
            await store.start()

        rows = await _rows(repository)
        assert "day-old" not in rows
        assert "hours-old" in rows


class TestFlush:
    @pytest.mark.asyncio
    async def test_pruned_row_is_a_lost_update(self, repository, database_factory, caplog):
        config, factory = database_factory()
        store = SessionStore(config, RequestCookieJar(), backend_factory=factory)
        await store.set("a", 1)
        identifier = await store.get_id()
        async with repository._engine.begin() as conn:
            await conn.execute(repository.table.delete())

        with caplog.at_level(logging.INFO, logger="sessionkit"):
            await store.close()

        assert identifier not in await _rows(repository)
        assert any("no longer stored" in r.getMessage() for r in caplog.records)
        assert not any(r.levelno >= logging.ERROR for r in caplog.records)

    @pytest.mark.asyncio
    async def test_last_writer_wins(self, repository, database_factory):
        config, factory = database_factory(name="SID")
        first = SessionStore(config, RequestCookieJar({"SID": "shared"}), backend_factory=factory)
        second = SessionStore(config, RequestCookieJar({"SID": "shared"}), backend_factory=factory)
        await first.set("writer", "first")
        await second.set("writer", "second")

        await first.close()
        await second.close()

        value, _ = (await _rows(repository))["shared"]
        assert json.loads(value) == {"writer": "second"}


class TestBackendConstruction:
    @pytest.mark.asyncio
    async def test_unreachable_database_propagates(self, tmp_path, make_config):
        config = make_config("database")
        config._data["sessionkit"]["datasources"] = {
            "default": {"url": f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'db.sqlite'}"}
        }
        store = SessionStore(config, RequestCookieJar())

        with pytest.raises(BackendUnavailableError) as exc_info:
            await store.start()
        assert exc_info.value.backend == "database"
        assert exc_info.value.context["operation"] == "ping"
        assert store.started is False

    @pytest.mark.asyncio
    async def test_owned_engine_from_datasource(self, tmp_path, make_config):
        config = make_config("database", database={"server": "sessions", "table": "web_sessions", "create_table": True})
        config._data["sessionkit"]["datasources"] = {
            "sessions": {"url": f"sqlite+aiosqlite:///{tmp_path / 'owned.db'}"}
        }
        async with SessionStore(config, RequestCookieJar()) as store:
            await store.set("a", 1)
            identifier = await store.get_id()

        async with SessionStore(config, RequestCookieJar({"SESSIONKITSID": identifier})) as again:
            assert await again.get("a") == 1

    @pytest.mark.asyncio
    async def test_undefined_datasource_is_configuration_error(self, make_config):
        config = make_config("database", database={"server": "reporting"})
        store = SessionStore(config, RequestCookieJar())

        with pytest.raises(ConfigurationError, match="reporting"):
            await store.start()
