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
"""WebFilter protocol — what WebFilterChainMiddleware runs around an application.

Request/Response are typed as ``Any`` so that Starlette types stay
confined to the adapter layer.
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any, Protocol, runtime_checkable

CallNext = Callable[[Any], Coroutine[Any, Any, Any]]


@runtime_checkable
class WebFilter(Protocol):
    def should_not_filter(self, request: Any) -> bool:
        """``True`` lets the request bypass this filter."""
        ...

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Return a response, normally the one from ``await call_next(request)``."""
        ...
