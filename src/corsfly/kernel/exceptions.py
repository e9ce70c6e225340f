"""Exception hierarchy for corsfly.

All library exceptions inherit from CorsFlyException. They are raised only
while configuration is being built; request handling never wraps errors
coming from origin resolvers or downstream handlers.

Categories:
- InfrastructureException: Failures of the surrounding setup
- ConfigurationException: Invalid or unusable configuration
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class CorsFlyException(Exception):
    """Base exception for all corsfly errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CORS_CONFIG_001").
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
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(CorsFlyException):
    """Failures of the surrounding setup rather than of a single request."""


class ConfigurationException(InfrastructureException):
    """Configuration is missing, malformed, or cannot be bound."""


class CorsConfigurationException(ConfigurationException):
    """CORS options cannot be turned into a usable policy."""
