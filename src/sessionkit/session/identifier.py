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
"""Session identifier issuance and validation."""

from __future__ import annotations

import hashlib
import random
import re
import time
import uuid

IDENTIFIER_LENGTH = 26

# Width of the relational id column.
MAX_IDENTIFIER_LENGTH = 64

_IDENTIFIER_RE = re.compile(rf"[A-Za-z0-9-]{{1,{MAX_IDENTIFIER_LENGTH}}}")


class IdentifierIssuer:
    """Mints and checks session identifiers.

    Minted identifiers are 26 lowercase hex characters. They are unique in
    practice but not meant to be unguessable secrets.
    """

    def generate(self) -> str:
        seed = f"{time.time_ns()}:{uuid.uuid4().hex}:{random.getrandbits(64)}"
        return hashlib.md5(seed.encode(), usedforsecurity=False).hexdigest()[:IDENTIFIER_LENGTH]

    def validate(self, candidate: str | None) -> bool:
        """Return ``True`` if *candidate* is 1 to 64 alphanumerics or hyphens.

        Longer values could not be stored as a file name or table key.
        """
        return candidate is not None and _IDENTIFIER_RE.fullmatch(candidate) is not None
