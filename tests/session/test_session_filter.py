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
"""Tests for SessionFilter wired into a Starlette application."""

from __future__ import annotations

import pytest
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from sessionkit.cache.adapters.memory import InMemoryCache
from sessionkit.core.application import SessionKitApplication
from sessionkit.core.config import Config
from sessionkit.session.factory import SessionBackendFactory
from sessionkit.web.adapters.starlette.filter_chain import WebFilterChainMiddleware

VALID_ID = "0123456789abcdef0123456789"


async def _counter(request: Request) -> JSONResponse:
    session = request.state.session
    visits = (await session.get("visits") or 0) + 1
    await session.set("visits", visits)
    return JSONResponse({"visits": visits, "id": await session.get_id()})


async def _static(request: Request) -> PlainTextResponse:
    return PlainTextResponse("static")


async def _dump(request: Request) -> JSONResponse:
    return JSONResponse(await request.state.session.get_all())


async def _has_session(request: Request) -> JSONResponse:
    return JSONResponse({"has_session": hasattr(request.state, "session")})


async def _broken(request: Request) -> PlainTextResponse:
    await request.state.session.set("before_crash", True)
    raise RuntimeError("handler failed")


ROUTES = [
    Route("/counter", _counter),
    Route("/static", _static),
    Route("/broken", _broken),
    Route("/dump", _dump),
    Route("/health", _has_session),
    Route("/assets/app.js", _has_session),
    Route("/account", _has_session),
]


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def application(cache) -> SessionKitApplication:
    config = Config({"sessionkit": {"session": {"type": "memcached", "name": "SID"}}})
    return SessionKitApplication(config=config, backend_factory=SessionBackendFactory(config, cache=cache))


@pytest.fixture
def client(application) -> TestClient:
    app = Starlette(
        routes=ROUTES,
        middleware=[Middleware(WebFilterChainMiddleware, filters=[application.session_filter()])],
    )
    return TestClient(app, raise_server_exceptions=False)


class TestSessionFilter:
    def test_state_persists_across_requests(self, client):
        first = client.get("/counter").json()
        second = client.get("/counter").json()

        assert first["visits"] == 1
        assert second == {"visits": 2, "id": first["id"]}

    def test_cookie_is_issued(self, client):
        resp = client.get("/counter")
        cookie = resp.headers["set-cookie"]
        assert cookie.startswith(f"SID={resp.json()['id']};")
        assert "Max-Age" not in cookie

    def test_untouched_session_sets_no_cookie(self, client, cache):
        resp = client.get("/static")
        assert resp.text == "static"
        assert "set-cookie" not in resp.headers
        assert cache.servers == []

    def test_presented_identifier_is_reused(self, client):
        client.cookies.set("SID", VALID_ID)
        assert client.get("/counter").json() == {"visits": 1, "id": VALID_ID}

    def test_malformed_identifier_is_replaced(self, client):
        client.cookies.set("SID", "bad.id")
        body = client.get("/counter").json()
        assert body["id"] != "bad.id"
        assert len(body["id"]) == 26

    def test_failing_handler_still_flushes(self, client):
        client.cookies.set("SID", VALID_ID)

        resp = client.get("/broken")

        assert resp.status_code == 500
        assert client.get("/dump").json() == {"before_crash": True}


class TestApplicationWrap:
    def test_wrap_attaches_session(self, application):
        client = TestClient(application.wrap(Starlette(routes=ROUTES)))
        assert client.get("/counter").json()["visits"] == 1
        assert client.get("/counter").json()["visits"] == 2

    def test_excluded_paths_get_no_session(self, application):
        client = TestClient(application.wrap(Starlette(routes=ROUTES), exclude_paths=["/health", "/assets/*"]))

        assert client.get("/health").json() == {"has_session": False}
        assert client.get("/assets/app.js").json() == {"has_session": False}
        assert client.get("/account").json() == {"has_session": True}
