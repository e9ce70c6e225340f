"""corsfly Logging — logging port and structlog adapter."""

from corsfly.logging.port import LoggingPort
from corsfly.logging.structlog_adapter import StructlogAdapter

__all__ = ["LoggingPort", "StructlogAdapter"]
