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
"""Relational session table and its async SQLAlchemy repository.

One row per session identifier::

    id             VARCHAR(64)  primary key
    session_value  TEXT         JSON document of the session data, NULL until first flush
    updated_at     DATETIME     UTC, refreshed on every flush

The table name is configurable, so the table is declared with SQLAlchemy
Core rather than as a mapped entity.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Column, DateTime, MetaData, String, Table, Text, delete, insert, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from sessionkit.kernel.exceptions import BackendUnavailableError

_logger = logging.getLogger(__name__)

_BACKEND = "database"

DEFAULT_TABLE = "_sessions"


def sessions_table(name: str = DEFAULT_TABLE, metadata: MetaData | None = None) -> Table:
    """Declare the session table under *name*."""
    return Table(
        name,
        metadata if metadata is not None else MetaData(),
        Column("id", String(64), primary_key=True),
        Column("session_value", Text, nullable=True),
        Column("updated_at", DateTime, nullable=False, index=True),
    )


@dataclass(frozen=True)
class SessionRow:
    identifier: str
    value: str | None
    updated_at: datetime


class SessionRepository:
    """Parameterized access to the session table.

    Every statement runs in its own short transaction. Driver and connection
    failures are raised as :class:`BackendUnavailableError`.

    Args:
        engine: An async SQLAlchemy engine.
        table_name: Name of the session table.
        dispose_on_stop: Dispose the engine in :meth:`stop` (set when the
            repository created the engine itself).
    """

    def __init__(self, engine: AsyncEngine, table_name: str = DEFAULT_TABLE, *, dispose_on_stop: bool = False) -> None:
        self._engine = engine
        self._metadata = MetaData()
        self._table = sessions_table(table_name, self._metadata)
        self._dispose_on_stop = dispose_on_stop

    @property
    def table(self) -> Table:
        return self._table

    @contextlib.asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncConnection]:
        try:
            async with self._engine.begin() as conn:
                yield conn
        except IntegrityError:
            raise
        except (SQLAlchemyError, OSError) as exc:
            raise BackendUnavailableError(
                f"Session table {operation} failed: {exc}",
                backend=_BACKEND,
                context={"table": self._table.name, "operation": operation},
            ) from exc

    async def create_schema(self) -> None:
        """Create the session table if it does not exist."""
        async with self._transaction("create") as conn:
            await conn.run_sync(self._metadata.create_all, checkfirst=True)

    async def purge_expired(self, cutoff: datetime) -> int:
        """Delete every row last updated at or before *cutoff*. Returns the row count."""
        async with self._transaction("purge") as conn:
            result = await conn.execute(delete(self._table).where(self._table.c.updated_at <= cutoff))
            purged = result.rowcount
        return purged

    async def find(self, identifier: str) -> SessionRow | None:
        """Load the row for *identifier*, or ``None`` if absent."""
        async with self._transaction("select") as conn:
            result = await conn.execute(
                select(self._table.c.id, self._table.c.session_value, self._table.c.updated_at).where(
                    self._table.c.id == identifier
                )
            )
            row = result.first()
        if row is None:
            return None
        return SessionRow(identifier=row.id, value=row.session_value, updated_at=row.updated_at)

    async def insert_placeholder(self, identifier: str, now: datetime) -> None:
        """Insert an empty row for *identifier*.

        A concurrent request may have inserted the same row first; the
        existing row is kept in that case.
        """
        try:
            async with self._transaction("insert") as conn:
                await conn.execute(
                    insert(self._table).values(id=identifier, session_value=None, updated_at=now)
                )
        except IntegrityError:
            _logger.debug("Session row %s already inserted by a concurrent request", identifier)

    async def update_value(self, identifier: str, value: str, now: datetime) -> int:
        """Store *value* for *identifier*. Returns the number of affected rows."""
        async with self._transaction("update") as conn:
            result = await conn.execute(
                update(self._table)
                .where(self._table.c.id == identifier)
                .values(session_value=value, updated_at=now)
            )
            affected = result.rowcount
        return affected

    async def start(self) -> None:
        """Validate connectivity with a trivial query."""
        async with self._transaction("ping") as conn:
            await conn.execute(text("SELECT 1"))

    async def stop(self) -> None:
        if self._dispose_on_stop:
            await self._engine.dispose()
