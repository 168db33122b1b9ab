"""Veilshare Core - exceptions, configuration, logging and registry state."""

from .config import CoreSettings, clear_config_cache, get_config
from .exceptions import (
    AuthorizationError,
    ConfigException,
    NotFoundError,
    OracleError,
    StateError,
    ValidationError,
    VeilshareException,
)
from .logging import (
    OperationLogger,
    configure_logging,
    correlation_context,
    operation_logger,
)

__all__ = [
    # Config
    "CoreSettings",
    "get_config",
    "clear_config_cache",
    # Exceptions
    "VeilshareException",
    "ValidationError",
    "AuthorizationError",
    "NotFoundError",
    "StateError",
    "OracleError",
    "ConfigException",
    # Logging
    "configure_logging",
    "correlation_context",
    "OperationLogger",
    "operation_logger",
]
