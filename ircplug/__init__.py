"""ircplug: a single-connection IRC client with a plugin dispatch core."""

from .access import AccessRepository, AccessStore  # noqa: F401
from .client import CommandHandler, IRCClient  # noqa: F401
from .config import ConfigRepository, ConfigStore, ServerSettings  # noqa: F401
from .errors import (  # noqa: F401
    ConfigError,
    DuplicateHandlerError,
    DuplicatePluginError,
    RegistrationClosedError,
    RegistrationError,
    TransportError,
)
from .irc import ConnectionState, IRCCommand, IRCConnection, IRCEvent  # noqa: F401
from .plugins import Plugin  # noqa: F401

__all__ = [
    "AccessRepository",
    "AccessStore",
    "CommandHandler",
    "ConfigError",
    "ConfigRepository",
    "ConfigStore",
    "ConnectionState",
    "DuplicateHandlerError",
    "DuplicatePluginError",
    "IRCClient",
    "IRCCommand",
    "IRCConnection",
    "IRCEvent",
    "Plugin",
    "RegistrationClosedError",
    "RegistrationError",
    "ServerSettings",
    "TransportError",
]
