"""Error hierarchy and error logging helpers."""

from .handling import log_error, retry_transport  # noqa: F401
from .internal import (  # noqa: F401
    AccessPatternError,
    ConfigError,
    DuplicateHandlerError,
    DuplicatePluginError,
    InternalError,
    NetworkError,
    PluginRegistrationError,
    RegistrationClosedError,
    RegistrationError,
    TransportError,
)

__all__ = [
    "AccessPatternError",
    "ConfigError",
    "DuplicateHandlerError",
    "DuplicatePluginError",
    "InternalError",
    "NetworkError",
    "PluginRegistrationError",
    "RegistrationClosedError",
    "RegistrationError",
    "TransportError",
    "log_error",
    "retry_transport",
]
