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
"""sessionkit Session — pluggable session-state store.

Backends are selected by ``sessionkit.session.type``::

    from sessionkit.session.adapters.file import FileSessionBackend          # file
    from sessionkit.session.adapters.cache import CacheSessionBackend        # memcached
    from sessionkit.session.adapters.database import DatabaseSessionBackend  # database
"""

from sessionkit.session.cookies import RequestCookieJar
from sessionkit.session.factory import SessionBackendFactory
from sessionkit.session.filter import SessionFilter
from sessionkit.session.identifier import IdentifierIssuer
from sessionkit.session.ports.outbound import CookieJar, NativeSession, SessionBackend
from sessionkit.session.properties import EngineType, SessionProperties, load_session_properties
from sessionkit.session.store import SessionStore

__all__ = [
    "CookieJar",
    "EngineType",
    "IdentifierIssuer",
    "NativeSession",
    "RequestCookieJar",
    "SessionBackend",
    "SessionBackendFactory",
    "SessionFilter",
    "SessionProperties",
    "SessionStore",
    "load_session_properties",
]
