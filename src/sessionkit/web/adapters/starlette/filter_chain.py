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
"""WebFilterChainMiddleware — pure ASGI middleware running WebFilters around an app."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from sessionkit.web.ports.filter import CallNext, WebFilter


class WebFilterChainMiddleware:
    """Runs filters around an ASGI app, the first filter outermost.

    The app's response is buffered into a Starlette ``Response`` before the
    filters see it, so they can still set cookies and headers. Non-HTTP
    scopes, and apps wrapped with no filters, are passed straight through.
    """

    def __init__(self, app: ASGIApp, filters: Sequence[WebFilter] = ()) -> None:
        self.app = app
        self.filters = tuple(filters)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.filters:
            await self.app(scope, receive, send)
            return

        async def endpoint(request: Request) -> Response:
            return await _buffer(self.app, scope, receive)

        chain: CallNext = endpoint
        for web_filter in reversed(self.filters):
            chain = _link(web_filter, chain)

        response = await chain(Request(scope, receive, send))
        await response(scope, receive, send)


async def _buffer(app: ASGIApp, scope: Scope, receive: Receive) -> Response:
    start: dict[str, Any] = {}
    chunks: list[bytes] = []

    async def collect(message: Message) -> None:
        if message["type"] == "http.response.start":
            start.update(message)
        elif message["type"] == "http.response.body":
            chunks.append(message.get("body", b""))

    await app(scope, receive, collect)

    response = Response(b"".join(chunks), status_code=start.get("status", 500))
    response.raw_headers[:] = list(start.get("headers", []))
    return response


def _link(web_filter: WebFilter, call_next: CallNext) -> CallNext:
    async def step(request: Request) -> Any:
        if web_filter.should_not_filter(request):
            return await call_next(request)
        return await web_filter.do_filter(request, call_next)

    return step
