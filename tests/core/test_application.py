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
"""Tests for SessionKitApplication bootstrap."""

import pytest

from sessionkit.cache.adapters.memory import InMemoryCache
from sessionkit.core.application import SessionKitApplication
from sessionkit.core.config import LIBRARY_DEFAULTS, Config
from sessionkit.kernel.exceptions import ConfigurationError
from sessionkit.session.cookies import RequestCookieJar
from sessionkit.session.factory import SessionBackendFactory
from sessionkit.session.filter import SessionFilter
from sessionkit.web.adapters.starlette.filter_chain import WebFilterChainMiddleware


class TestConfigLoading:
    def test_library_defaults_without_config(self):
        app = SessionKitApplication()
        assert app.config.get("sessionkit.session.name") == "SESSIONKITSID"
        assert app.config.loaded_sources == [LIBRARY_DEFAULTS]

    def test_config_file(self, tmp_path):
        config_file = tmp_path / "sessionkit.yaml"
        config_file.write_text("sessionkit:\n  session:\n    type: file\n    name: APPSID\n")
        app = SessionKitApplication(config_path=config_file)
        assert app.config.get("sessionkit.session.type") == "file"
        assert app.config.get("sessionkit.session.name") == "APPSID"

    def test_config_directory(self, tmp_path):
        (tmp_path / "sessionkit.yaml").write_text("sessionkit:\n  session:\n    type: database\n")
        app = SessionKitApplication(config_path=tmp_path)
        assert app.config.get("sessionkit.session.type") == "database"

    def test_invalid_logging_settings(self):
        config = Config({"sessionkit": {"logging": {"format": "xml"}}})
        with pytest.raises(ConfigurationError):
            SessionKitApplication(config=config)

    def test_given_config_wins(self, tmp_path):
        config = Config({"sessionkit": {"session": {"type": "memcached"}}})
        app = SessionKitApplication(config=config, config_path=tmp_path / "ignored.yaml")
        assert app.config is config


class TestSessions:
    @pytest.mark.asyncio
    async def test_open_session_wraps_cookie_mapping(self):
        config = Config({"sessionkit": {"session": {"type": "memcached", "name": "SID"}}})
        cache = InMemoryCache()
        app = SessionKitApplication(config=config, backend_factory=SessionBackendFactory(config, cache=cache))

        async with app.open_session({"SID": "abc-123"}) as session:
            await session.set("k", "v")
            assert await session.get_id() == "abc-123"

        async with app.open_session({"SID": "abc-123"}) as session:
            assert await session.get("k") == "v"

    def test_open_session_keeps_cookie_jar(self):
        app = SessionKitApplication(config=Config({}))
        jar = RequestCookieJar()
        store = app.open_session(jar)
        assert store._cookies is jar

    def test_session_filter_and_wrap_share_factory(self):
        app = SessionKitApplication(config=Config({}))
        session_filter = app.session_filter()
        assert isinstance(session_filter, SessionFilter)
        assert session_filter._backend_factory is app.backend_factory

        async def asgi_app(scope, receive, send):
            pass

        assert isinstance(app.wrap(asgi_app), WebFilterChainMiddleware)

    def test_session_filter_exclude_paths(self):
        app = SessionKitApplication(config=Config({}))
        assert app.session_filter(["/health", "/static/*"]).exclude_paths == ("/health", "/static/*")
        assert app.session_filter().exclude_paths == ()
