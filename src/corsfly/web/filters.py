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
"""OncePerRequestFilter — path-scoped base class for WebFilters.

Only ``request.url.path`` is read, so the base class stays free of any
Starlette import.
"""

from __future__ import annotations

import abc
from collections.abc import Iterable
from fnmatch import fnmatch
from typing import Any

from corsfly.web.ports.filter import CallNext


def _any_match(path: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch(path, pattern) for pattern in patterns)


class OncePerRequestFilter(abc.ABC):
    """Base for filters that apply to a subset of paths.

    ``url_patterns`` selects paths (empty selects all of them) and
    ``exclude_patterns`` removes paths from that selection.  Both are
    ``fnmatch`` globs; subclasses set them as class attributes or per
    instance.
    """

    url_patterns: list[str] = []
    exclude_patterns: list[str] = []

    def applies_to(self, path: str) -> bool:
        """Return ``True`` when *path* is selected and not excluded."""
        if self.url_patterns and not _any_match(path, self.url_patterns):
            return False
        return not _any_match(path, self.exclude_patterns)

    def should_not_filter(self, request: Any) -> bool:
        return not self.applies_to(request.url.path)

    @abc.abstractmethod
    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Handle *request*; ``await call_next(request)`` continues the chain."""
        ...
