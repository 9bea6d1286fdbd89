"""Centralized internal error hierarchy.

These exceptions provide semantic categories for the connection, registration
and configuration layers. Raw socket / regex / pydantic errors are wrapped into
one of these before they cross a public API boundary.

Classes:
  InternalError            – Base for all internal errors.
  NetworkError             – Transport level issues.
  TransportError           – Connecting to or talking to the server failed.
  RegistrationError        – The NICK/USER handshake did not complete.
  PluginRegistrationError  – Base for plugin / handler registration failures.
  DuplicatePluginError     – A plugin with the same name is already registered.
  DuplicateHandlerError    – A command verb already has an owner.
  RegistrationClosedError  – Registration attempted after connect().
  ConfigError              – Missing or invalid configuration.
  AccessPatternError       – An access pattern is not a valid regular expression.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for network or transport layer errors."""


class TransportError(NetworkError):
    """The transport could not be opened, or failed while reading/writing.

    Surfaced from ``IRCClient.connect`` and ``IRCClient.input_loop``; the
    caller decides whether to reconnect.
    """


class RegistrationError(NetworkError):
    """The server connection ended before the welcome numeric (001) arrived."""


class PluginRegistrationError(InternalError):
    """Base class for errors raised synchronously by the registration APIs."""


class DuplicatePluginError(PluginRegistrationError):
    """A plugin with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Plugin already exists: {name}", data={"plugin": name})
        self.name = name


class DuplicateHandlerError(PluginRegistrationError):
    """The command verb is already bound to another plugin."""

    def __init__(self, command: str, owner: str) -> None:
        super().__init__(
            f"Handler is already registered by plugin: {owner}",
            data={"command": command, "owner": owner},
        )
        self.command = command
        self.owner = owner


class RegistrationClosedError(PluginRegistrationError):
    """Plugins and handlers can only be registered before connect()."""


class ConfigError(InternalError):
    """Configuration is missing, malformed, or fails validation."""


class AccessPatternError(InternalError):
    """An access-control pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(
            f"Invalid access pattern {pattern!r}: {reason}", data={"pattern": pattern}
        )
        self.pattern = pattern


__all__ = [
    "InternalError",
    "NetworkError",
    "TransportError",
    "RegistrationError",
    "PluginRegistrationError",
    "DuplicatePluginError",
    "DuplicateHandlerError",
    "RegistrationClosedError",
    "ConfigError",
    "AccessPatternError",
]
