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
"""CORS filter — answers preflights and decorates actual responses."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, cast

import structlog
from starlette.requests import Request
from starlette.responses import Response

from corsfly.container.ordering import HIGHEST_PRECEDENCE, order
from corsfly.web.cors import ALLOW_ORIGIN, CORSConfig, CorsPolicy, validate_cors_options
from corsfly.web.filters import OncePerRequestFilter
from corsfly.web.ports.filter import CallNext

logger = structlog.get_logger("corsfly.web")


@order(HIGHEST_PRECEDENCE + 300)
class CorsFilter(OncePerRequestFilter):
    """Applies a :class:`CorsPolicy` to every request in the chain.

    ``OPTIONS`` requests are answered here with ``204 No Content`` and never
    reach later filters or the route.  Other requests continue down the
    chain; exceptions raised there propagate untouched.

    ``url_patterns`` and ``exclude_patterns`` are globs that limit CORS to
    part of the application; requests outside them pass through with no
    CORS headers and preflights reach the route.
    """

    def __init__(
        self,
        config: CORSConfig | None = None,
        url_patterns: Sequence[str] = (),
        exclude_patterns: Sequence[str] = (),
    ) -> None:
        self._policy = CorsPolicy(config)
        self.url_patterns = list(url_patterns)
        self.exclude_patterns = list(exclude_patterns)

    @property
    def policy(self) -> CorsPolicy:
        return self._policy

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        policy = self._policy

        if policy.is_preflight(request):
            headers = policy.preflight_headers(request)
            logger.debug("cors_preflight", path=request.url.path, origin=headers.get(ALLOW_ORIGIN))
            return Response(status_code=204, headers=headers)

        # Resolved before delegating; a downstream handler that sets any of
        # these headers itself keeps its own value.
        headers = policy.actual_headers(request)
        response = cast(Response, await call_next(request))
        for name, value in headers.items():
            response.headers.setdefault(name, value)
        return response


def create_cors_filter(
    options: Any = True,
    url_patterns: Sequence[str] = (),
    exclude_patterns: Sequence[str] = (),
) -> CorsFilter | None:
    """Build a :class:`CorsFilter` from loosely-typed options.

    Accepts whatever :func:`validate_cors_options` accepts, or a ready
    :class:`CORSConfig`.  ``True`` gives a filter with all defaults; a
    disabled configuration gives ``None``.  Path patterns are handed to the
    filter unchanged.
    """
    if isinstance(options, CORSConfig):
        return CorsFilter(options, url_patterns, exclude_patterns)

    normalized = validate_cors_options(options)
    if not normalized["enabled"]:
        return None
    return CorsFilter(CORSConfig.from_options(normalized), url_patterns, exclude_patterns)
