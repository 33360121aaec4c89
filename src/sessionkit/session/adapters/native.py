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
"""Native file session: cookie-transported id, one JSON document per session on disk."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from sessionkit.kernel.exceptions import BackendUnavailableError
from sessionkit.session.identifier import IdentifierIssuer
from sessionkit.session.ports.outbound import CookieJar

_logger = logging.getLogger(__name__)

_BACKEND = "file"

FILE_PREFIX = "sess_"


class FileNativeSession:
    """Server-side session stored as ``<save_path>/sess_<id>``.

    The id comes from the request cookie when it is well formed, otherwise
    a new one is minted; the cookie is (re)written on start. ``data`` is the
    whole session document and is written back by :meth:`commit`. No file
    locking is done: concurrent requests for one id are last-writer-wins.
    """

    def __init__(
        self,
        cookies: CookieJar,
        save_path: str | Path,
        issuer: IdentifierIssuer | None = None,
        name: str = "SESSIONKITSID",
    ) -> None:
        self._cookies = cookies
        self._save_path = Path(save_path)
        self._issuer = issuer or IdentifierIssuer()
        self.name = name
        self.session_id: str | None = None
        self.data: dict[str, Any] = {}
        self._cookie_params: dict[str, Any] = {
            "ttl": 0,
            "path": "/",
            "domain": None,
            "secure": False,
            "http_only": False,
        }
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def set_cookie_params(
        self,
        lifetime: int = 0,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        http_only: bool = False,
    ) -> None:
        self._cookie_params = {
            "ttl": lifetime,
            "path": path,
            "domain": domain,
            "secure": secure,
            "http_only": http_only,
        }

    def _file(self) -> Path:
        if not self._issuer.validate(self.session_id):
            raise ValueError(f"Invalid session id {self.session_id!r}")
        return self._save_path / f"{FILE_PREFIX}{self.session_id}"

    async def start(self) -> None:
        if self._started:
            return
        if self.session_id is None:
            candidate = self._cookies.get(self.name)
            self.session_id = candidate if self._issuer.validate(candidate) else self._issuer.generate()

        path = self._file()
        try:
            self.data = await asyncio.to_thread(self._read, path)
        except OSError as exc:
            raise BackendUnavailableError(f"Cannot read session file {path}: {exc}", backend=_BACKEND) from exc

        self._cookies.set(self.name, self.session_id, **self._cookie_params)
        self._started = True

    async def commit(self) -> None:
        if not self._started:
            return
        path = self._file()
        try:
            await asyncio.to_thread(self._write, path, self.data)
        except OSError as exc:
            raise BackendUnavailableError(f"Cannot write session file {path}: {exc}", backend=_BACKEND) from exc

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            _logger.warning("Discarding corrupt session file %s", path)
            return {}
        return document if isinstance(document, dict) else {}

    @staticmethod
    def _write(path: Path, document: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".sess-", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f)
            os.replace(tmp, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp)
            raise
