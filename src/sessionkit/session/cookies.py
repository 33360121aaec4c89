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
"""RequestCookieJar — CookieJar over a request's cookies and a pending response."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PendingCookie:
    """A cookie write (or deletion, when ``value`` is ``None``) queued for the response."""

    value: str | None
    ttl: int = 0
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    http_only: bool = False

    @property
    def deleted(self) -> bool:
        return self.value is None


class RequestCookieJar:
    """Cookies of one request, with writes queued until the response exists.

    Reads see queued writes first, then the request's cookies. A ``ttl`` of
    0 makes a browser-session cookie (no ``Max-Age``).
    """

    def __init__(self, request_cookies: Mapping[str, str] | None = None) -> None:
        self._incoming = dict(request_cookies or {})
        self._pending: dict[str, PendingCookie] = {}

    @property
    def pending(self) -> dict[str, PendingCookie]:
        return dict(self._pending)

    def get(self, name: str) -> str | None:
        if name in self._pending:
            return self._pending[name].value
        return self._incoming.get(name)

    def set(
        self,
        name: str,
        value: str,
        ttl: int = 0,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        http_only: bool = False,
    ) -> None:
        self._pending[name] = PendingCookie(value, ttl, path, domain, secure, http_only)

    def delete(self, name: str, path: str = "/", domain: str | None = None) -> None:
        self._pending[name] = PendingCookie(None, path=path, domain=domain)

    def apply(self, response: Any) -> None:
        """Write queued cookies onto a Starlette response."""
        for name, cookie in self._pending.items():
            if cookie.deleted:
                response.delete_cookie(key=name, path=cookie.path, domain=cookie.domain)
                continue
            response.set_cookie(
                key=name,
                value=cookie.value,
                max_age=cookie.ttl or None,
                path=cookie.path,
                domain=cookie.domain,
                secure=cookie.secure,
                httponly=cookie.http_only,
            )
