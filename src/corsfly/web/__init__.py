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
"""corsfly Web — CORS policy with a pluggable adapter layer.

Framework-agnostic types (config, policy, filter port) are exported directly.
Default adapter (Starlette) exports are re-exported for convenience.
"""

# Default adapter (Starlette) re-exports
from corsfly.web.adapters.starlette import (
    CorsFilter,
    CorsMiddleware,
    RequestLoggingFilter,
    WebFilterChainMiddleware,
    create_app,
    create_app_from_config,
    create_cors_filter,
)

# Framework-agnostic exports
from corsfly.web.cors import (
    CORSConfig,
    CorsPolicy,
    DynamicOrigin,
    LiteralOrigin,
    WildcardOrigin,
    validate_cors_options,
)
from corsfly.web.filters import OncePerRequestFilter
from corsfly.web.ports.filter import CallNext, WebFilter

__all__ = [
    # Framework-agnostic
    "CORSConfig",
    "CallNext",
    "CorsPolicy",
    "DynamicOrigin",
    "LiteralOrigin",
    "OncePerRequestFilter",
    "WebFilter",
    "WildcardOrigin",
    "validate_cors_options",
    # Default adapter (Starlette)
    "CorsFilter",
    "CorsMiddleware",
    "RequestLoggingFilter",
    "WebFilterChainMiddleware",
    "create_app",
    "create_app_from_config",
    "create_cors_filter",
]
