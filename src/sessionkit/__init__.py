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
"""sessionkit — a pluggable session-state store.

Session data lives in one of three engines, chosen by configuration:
server-side files, a distributed cache, or a relational table::

    from sessionkit import Config, RequestCookieJar, SessionStore

    config = Config({"sessionkit": {"session": {"type": "database", "expires": 30}}})
    async with SessionStore(config, RequestCookieJar(request.cookies)) as session:
        await session.set("user", 42)
"""

from sessionkit.core.application import SessionKitApplication
from sessionkit.core.config import Config
from sessionkit.kernel.exceptions import (
    BackendUnavailableError,
    ConfigurationError,
    InvalidSessionValueError,
    SessionKitException,
)
from sessionkit.session import (
    EngineType,
    IdentifierIssuer,
    RequestCookieJar,
    SessionBackendFactory,
    SessionFilter,
    SessionProperties,
    SessionStore,
)

__version__ = "0.1.0"

__all__ = [
    "BackendUnavailableError",
    "Config",
    "ConfigurationError",
    "EngineType",
    "IdentifierIssuer",
    "InvalidSessionValueError",
    "RequestCookieJar",
    "SessionBackendFactory",
    "SessionFilter",
    "SessionKitApplication",
    "SessionKitException",
    "SessionProperties",
    "SessionStore",
]
