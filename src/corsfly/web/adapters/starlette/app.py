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
"""corsfly web application factory built on Starlette."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import BaseRoute

from corsfly.config.properties.web import WebProperties
from corsfly.core.config import Config
from corsfly.logging.port import LoggingPort
from corsfly.logging.structlog_adapter import StructlogAdapter
from corsfly.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from corsfly.web.adapters.starlette.filters import RequestLoggingFilter, create_cors_filter
from corsfly.web.ports.filter import WebFilter

logger = structlog.get_logger("corsfly.web")


def create_app(
    title: str = "corsfly",
    debug: bool = False,
    cors: Any = None,
    filters: Sequence[WebFilter] | None = None,
    extra_routes: Sequence[BaseRoute] | None = None,
    lifespan: Any = None,
) -> Starlette:
    """Create a Starlette application wrapped in the corsfly filter chain.

    ``cors`` accepts a :class:`~corsfly.web.cors.CORSConfig`, ``True`` for
    the defaults, or a raw options mapping.  ``None``, ``False`` or
    ``{"enabled": False}`` leave CORS off and the chain a pure passthrough
    for cross-origin traffic.

    Includes:
    - Request logging filter
    - CORS filter (when enabled)
    - Caller-supplied filters, ordered by ``@order``
    """
    chain: list[WebFilter] = [RequestLoggingFilter()]

    cors_filter = create_cors_filter(cors)
    if cors_filter is not None:
        chain.append(cors_filter)

    chain.extend(filters or [])

    app = Starlette(
        debug=debug,
        middleware=[Middleware(WebFilterChainMiddleware, filters=chain)],
        routes=list(extra_routes or []),
        lifespan=lifespan,
    )
    app.state.corsfly_title = title
    app.state.corsfly_cors = cors_filter.policy.config if cors_filter is not None else None

    logger.info("app_created", title=title, cors_enabled=cors_filter is not None, filters=len(chain))
    return app


def create_app_from_config(
    config: Config,
    filters: Sequence[WebFilter] | None = None,
    extra_routes: Sequence[BaseRoute] | None = None,
    lifespan: Any = None,
    logging_port: LoggingPort | None = None,
) -> Starlette:
    """Create an application from the ``corsfly.*`` configuration tree.

    Configures logging first, then reads ``corsfly.web`` (debug flag and raw
    ``cors`` options) and ``corsfly.app.name`` for the title.
    """
    (logging_port or StructlogAdapter()).configure(config)

    props = config.bind(WebProperties)
    return create_app(
        title=str(config.get("corsfly.app.name", "corsfly")),
        debug=props.debug,
        cors=props.cors,
        filters=filters,
        extra_routes=extra_routes,
        lifespan=lifespan,
    )
