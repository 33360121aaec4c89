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
"""Unified exception hierarchy for sessionkit.

All library exceptions inherit from SessionKitException, enabling unified
error handling across modules.

Categories:
- BusinessException: Misconfiguration and other caller-side errors
- InfrastructureException: Database, cache and storage failures
"""

from __future__ import annotations

# =============================================================================
# Base Exception
# =============================================================================


class SessionKitException(Exception):
    """Base exception for all sessionkit errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SESSION_CONFIG").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(SessionKitException):
    """Caller-side errors: invalid settings or arguments."""


class ConfigurationError(BusinessException):
    """Session settings are missing or invalid.

    Fatal and non-retryable: raised before any backend is touched.
    """

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_CONFIG", context=context)


class InvalidSessionValueError(BusinessException, TypeError):
    """A session value cannot be stored as JSON.

    Raised by ``set()`` so the caller sees the failure before the flush does.
    """

    def __init__(self, message: str, key: str) -> None:
        super().__init__(message, code="SESSION_VALUE", context={"key": key})
        self.key = key


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(SessionKitException):
    """Infrastructure failures: database, cache, file storage."""


class BackendUnavailableError(InfrastructureException):
    """The session storage backend could not be reached or queried."""

    def __init__(self, message: str, backend: str, context: dict | None = None) -> None:
        ctx = {"backend": backend}
        if context:
            ctx.update(context)
        super().__init__(message, code="SESSION_BACKEND_UNAVAILABLE", context=ctx)
        self.backend = backend
