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
"""WebFilterChainMiddleware — pure ASGI middleware wrapping all WebFilters."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, cast

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from corsfly.container.ordering import get_order
from corsfly.web.ports.filter import CallNext, WebFilter


class _ResponseCollector:
    """ASGI ``send`` replacement that buffers the downstream response.

    Body chunks and ``http.response.pathsend`` files both end up in
    ``body_parts``, so the rebuilt response is always a plain buffered one.
    """

    def __init__(self) -> None:
        self.status_code = 200
        self.raw_headers: list[tuple[bytes, bytes]] = []
        self.body_parts: list[bytes] = []

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status_code = message["status"]
            self.raw_headers = list(message.get("headers", []))
        elif message["type"] == "http.response.body":
            body = message.get("body", b"")
            if body:
                self.body_parts.append(body)
        elif message["type"] == "http.response.pathsend":
            # Servers advertising the pathsend extension (Granian) get a path
            # instead of body chunks; filters still need the bytes.
            path = message.get("path", "")
            if path:
                self.body_parts.append(Path(path).read_bytes())

    def to_response(self) -> Response:
        response = Response(content=b"".join(self.body_parts), status_code=self.status_code)
        response.raw_headers[:] = self.raw_headers
        return response


class WebFilterChainMiddleware:
    """Pure ASGI middleware that executes a chain of :class:`WebFilter` instances.

    Filters are sorted by ``@order`` once, at construction.  A filter whose
    ``should_not_filter()`` returns ``True`` is skipped for that request.  A
    filter may return its own response without calling ``call_next``; the
    rest of the chain and the application are then never reached.
    """

    def __init__(self, app: ASGIApp, filters: Sequence[WebFilter] = ()) -> None:
        self.app = app
        self._filters = sorted(filters, key=lambda f: get_order(type(f)))

    @property
    def filters(self) -> list[WebFilter]:
        return list(self._filters)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def _call_app(request: Request) -> Response:
            collector = _ResponseCollector()
            await self.app(scope, receive, collector)
            return collector.to_response()

        chain: CallNext = _call_app
        for web_filter in reversed(self._filters):
            chain = _wrap(web_filter, chain)

        response = cast(Response, await chain(Request(scope, receive, send)))
        await response(scope, receive, send)


def _wrap(web_filter: WebFilter, next_call: CallNext) -> CallNext:
    """Create a closure that conditionally invokes *web_filter*."""

    async def _inner(request: Any) -> Response:
        if web_filter.should_not_filter(request):
            return cast(Response, await next_call(request))
        return cast(Response, await web_filter.do_filter(request, next_call))

    return _inner
