"""Plugins every client registers: protocol keep-alive and store persistence."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..logs.logger import logger
from .base import Plugin

if TYPE_CHECKING:  # pragma: no cover
    from ..access.repository import AccessRepository
    from ..config.repository import ConfigRepository
    from ..irc.models import IRCEvent


class BasicProtocolPlugin(Plugin):
    """Answers server PINGs."""

    name = "basic"
    info = "handles basic protocol messages (PING)"

    async def process_line(self, event: IRCEvent) -> None:
        if event.command != "PING" or self.client is None:
            return
        await self.client.send(f"PONG :{event.target}")


class ConfigPlugin(Plugin):
    """Persists the client's configuration store when the client shuts down."""

    name = "conf"
    info = "stores configuration options"

    def __init__(self, repository: ConfigRepository | None = None) -> None:
        self.repository = repository

    def unregister(self) -> None:
        if self.repository is None or self.client is None:
            return
        if self.repository.save(self.client.config):
            logger.log_event("config", "saved", level=logging.DEBUG, path=self.repository.path)


class AuthPlugin(Plugin):
    """Persists the access database when the client shuts down."""

    name = "auth"
    info = "maps hostmasks to access levels"

    def __init__(self, repository: AccessRepository | None = None) -> None:
        self.repository = repository

    def unregister(self) -> None:
        if self.repository is None or self.client is None:
            return
        if self.repository.save_store(self.client.access):
            logger.log_event(
                "access",
                "saved",
                level=logging.DEBUG,
                path=self.repository.path,
                entries=len(self.client.access),
            )
