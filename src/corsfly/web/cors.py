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
"""CORS configuration and the framework-agnostic header policy.

The policy only reads ``request.method`` and ``request.headers`` so it can be
driven by any adapter.  Building responses is left to the adapter layer.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Union

import structlog

from corsfly.kernel.exceptions import CorsConfigurationException

logger = structlog.get_logger("corsfly.web")

ALLOW_ORIGIN = "Access-Control-Allow-Origin"
ALLOW_METHODS = "Access-Control-Allow-Methods"
ALLOW_HEADERS = "Access-Control-Allow-Headers"
MAX_AGE = "Access-Control-Max-Age"
ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
EXPOSE_HEADERS = "Access-Control-Expose-Headers"

WILDCARD = "*"

DEFAULT_ALLOW_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS")
DEFAULT_ALLOW_HEADERS: tuple[str, ...] = ("Content-Type", "Authorization", "Accept", "X-Requested-With")
DEFAULT_MAX_AGE = 86400  # 24 hours

OriginResolver = Callable[[Any], Union[str, None]]

# camelCase spellings accepted in raw options
_OPTION_ALIASES: dict[str, str] = {
    "allowMethods": "allow_methods",
    "allowHeaders": "allow_headers",
    "exposeHeaders": "expose_headers",
    "maxAge": "max_age",
}


# ---------------------------------------------------------------------------
# Origin rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LiteralOrigin:
    """Always advertise the configured value, whatever the request says."""

    value: str | None

    def resolve(self, request: Any) -> str | None:
        return self.value


@dataclass(frozen=True)
class WildcardOrigin:
    """Echo the request's ``Origin`` header, or ``*`` when there is none."""

    def resolve(self, request: Any) -> str | None:
        return request.headers.get("origin") or WILDCARD


@dataclass(frozen=True)
class DynamicOrigin:
    """Ask a user function for the origin.  Its result is used verbatim."""

    resolver: OriginResolver

    def resolve(self, request: Any) -> str | None:
        return self.resolver(request)


OriginRule = Union[LiteralOrigin, WildcardOrigin, DynamicOrigin]


def origin_rule_for(origin: str | OriginResolver | None) -> OriginRule:
    """Map a configured ``origin`` value onto its rule."""
    if callable(origin):
        return DynamicOrigin(origin)
    if origin == WILDCARD:
        return WildcardOrigin()
    return LiteralOrigin(origin)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def _as_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class CORSConfig:
    """Configuration for Cross-Origin Resource Sharing.

    ``origin`` is a literal origin, ``"*"`` (echo the caller's origin), or a
    callable receiving the request.  List-valued fields are stored as tuples
    so the config stays read-only once built.
    """

    origin: str | OriginResolver | None = WILDCARD
    allow_methods: tuple[str, ...] = DEFAULT_ALLOW_METHODS
    allow_headers: tuple[str, ...] = DEFAULT_ALLOW_HEADERS
    expose_headers: tuple[str, ...] = ()
    max_age: int | None = DEFAULT_MAX_AGE  # seconds
    credentials: bool = False
    origin_rule: OriginRule = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "allow_methods", _as_tuple(self.allow_methods))
        object.__setattr__(self, "allow_headers", _as_tuple(self.allow_headers))
        object.__setattr__(self, "expose_headers", _as_tuple(self.expose_headers))
        object.__setattr__(self, "origin_rule", origin_rule_for(self.origin))

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> CORSConfig:
        """Merge normalized options over the defaults, field by field.

        Accepts snake_case field names and their camelCase aliases.  The
        ``enabled`` flag is consumed here; unknown keys are rejected.
        """
        if options.get("enabled") is False:
            raise CorsConfigurationException(
                "CORS is disabled; no policy can be built from these options",
                code="CORS_DISABLED",
            )

        known = {f.name for f in fields(cls) if f.init}
        kwargs: dict[str, Any] = {}
        unknown: list[str] = []
        for key, value in options.items():
            if key == "enabled":
                continue
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                unknown.append(key)
                continue
            kwargs[name] = value

        if unknown:
            raise CorsConfigurationException(
                f"Unknown CORS option(s): {', '.join(sorted(unknown))}",
                code="CORS_UNKNOWN_OPTION",
                context={"unknown": sorted(unknown)},
            )
        return cls(**kwargs)


def validate_cors_options(options: Any) -> dict[str, Any]:
    """Normalize loosely-typed CORS options into a dict with an ``enabled`` flag.

    - ``None`` -> ``{"enabled": False}``
    - ``True`` / ``False`` -> ``{"enabled": <bool>}``
    - a mapping -> ``{"enabled": <not explicitly False>, **options}``

    Sub-fields are passed through untouched; defaults are applied later by
    :meth:`CORSConfig.from_options`.  Any other input type is a configuration
    error.
    """
    if options is None:
        return {"enabled": False}

    if isinstance(options, bool):
        return {"enabled": options}

    if isinstance(options, Mapping):
        return {"enabled": options.get("enabled") is not False, **options}

    raise CorsConfigurationException(
        f"CORS options must be a boolean or a mapping, got {type(options).__name__}",
        code="CORS_INVALID_OPTIONS",
        context={"type": type(options).__name__},
    )


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


class CorsPolicy:
    """Decides which ``Access-Control-*`` headers a request gets.

    Stateless apart from the frozen config, so one instance serves all
    concurrent requests.
    """

    def __init__(self, config: CORSConfig | None = None) -> None:
        self._config = config or CORSConfig()

    @property
    def config(self) -> CORSConfig:
        return self._config

    def resolve_origin(self, request: Any) -> str | None:
        """Resolve the ``Access-Control-Allow-Origin`` value for *request*."""
        return self._config.origin_rule.resolve(request)

    @staticmethod
    def is_preflight(request: Any) -> bool:
        return request.method == "OPTIONS"

    def preflight_headers(self, request: Any) -> dict[str, str]:
        """Headers for an ``OPTIONS`` request answered by the policy itself."""
        cfg = self._config
        headers = self._origin_headers(request)

        if cfg.allow_methods:
            headers[ALLOW_METHODS] = ", ".join(cfg.allow_methods)
        if cfg.allow_headers:
            headers[ALLOW_HEADERS] = ", ".join(cfg.allow_headers)
        # 0 and None both suppress the header
        if cfg.max_age:
            headers[MAX_AGE] = str(cfg.max_age)
        if cfg.credentials:
            headers[ALLOW_CREDENTIALS] = "true"
        return headers

    def actual_headers(self, request: Any) -> dict[str, str]:
        """Headers added to a response produced downstream."""
        cfg = self._config
        headers = self._origin_headers(request)

        if cfg.expose_headers:
            headers[EXPOSE_HEADERS] = ", ".join(cfg.expose_headers)
        if cfg.credentials:
            headers[ALLOW_CREDENTIALS] = "true"
        return headers

    def _origin_headers(self, request: Any) -> dict[str, str]:
        origin = self.resolve_origin(request)
        if not origin:
            logger.debug("cors_origin_suppressed", method=request.method)
            return {}
        return {ALLOW_ORIGIN: origin}
