"""Plugin interface.

A plugin is registered once, before connecting, and lives until the client
shuts down:

    register(client)        called synchronously from register_plugin(); may
                            call client.register_command_handler()
    process_line(event)     every parsed inbound line, in receive order
    process_command(cmd)    only for commands routed to this plugin
    usage(command)          usage string shown when too few args are given
    unregister()            once, on disconnect or connection loss

``process_line``, ``process_command`` and ``unregister`` may be coroutines or
plain functions. Plain functions run in a worker thread so they may block.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from ..client import IRCClient
    from ..irc.models import IRCCommand, IRCEvent


class Plugin(ABC):
    """Base class for client extensions."""

    client: IRCClient | None = None

    @property
    @abstractmethod
    def name(self) -> str:  # pragma: no cover - interface
        """Unique identity the plugin is registered under."""
        raise NotImplementedError

    info: str = ""

    def __str__(self) -> str:
        return self.name

    def usage(self, command: str) -> str:
        _ = command
        return ""

    def register(self, client: IRCClient) -> None:
        self.client = client

    async def process_line(self, event: IRCEvent) -> None:
        _ = event

    async def process_command(self, cmd: IRCCommand) -> None:
        _ = cmd

    async def unregister(self) -> None:
        return None
