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
"""CORS middleware for Starlette — pure ASGI, no filter chain required."""

from __future__ import annotations

from typing import Any

import structlog
from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

from corsfly.web.cors import ALLOW_ORIGIN, CORSConfig, CorsPolicy

logger = structlog.get_logger("corsfly.web")


class CorsMiddleware:
    """Applies a :class:`CorsPolicy` as a standalone ASGI middleware.

    Preflight requests are answered directly.  For everything else the
    actual-request headers are injected into ``http.response.start``
    without overriding headers the application already set.
    """

    def __init__(self, app: ASGIApp, config: CORSConfig | None = None) -> None:
        self.app = app
        self._policy = CorsPolicy(config)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        policy = self._policy

        if policy.is_preflight(request):
            headers = policy.preflight_headers(request)
            logger.debug("cors_preflight", path=request.url.path, origin=headers.get(ALLOW_ORIGIN))
            response = Response(status_code=204, headers=headers)
            await response(scope, receive, send)
            return

        cors_headers = policy.actual_headers(request)

        async def send_with_cors(message: Any) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in cors_headers.items():
                    headers.setdefault(name, value)
            await send(message)

        await self.app(scope, receive, send_with_cors)
