"""Client facade: plugin registry, command table and line dispatch.

An :class:`IRCClient` manages exactly one server connection. Plugins and
command handlers are registered first (the build phase); ``connect()`` seals
the registry, runs the registration handshake and ``input_loop()`` then
dispatches every inbound line until the connection ends.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .access.repository import AccessRepository
from .access.store import AccessStore
from .config.model import SERVER_SECTION, ServerSettings
from .config.repository import ConfigRepository
from .config.store import ConfigStore
from .constants import DEFAULT_TRIGGER, UNAUTHORIZED_REPLY
from .dispatch import PluginMailbox, TaskTracker, call_hook
from .errors.internal import (
    DuplicateHandlerError,
    DuplicatePluginError,
    RegistrationClosedError,
    TransportError,
)
from .irc.connection import IRCConnection
from .irc.models import ConnectionState, IRCCommand, IRCEvent, nick_of
from .irc.parser import build_notice, is_message_verb, parse_command, parse_event
from .logs.logger import logger
from .plugins.base import Plugin
from .plugins.builtin import AuthPlugin, BasicProtocolPlugin, ConfigPlugin


@dataclass(frozen=True, slots=True)
class CommandHandler:
    command: str
    min_params: int
    min_access: int
    owner: Plugin


class IRCClient:  # pylint: disable=too-many-public-methods
    def __init__(
        self,
        config: ConfigStore | None = None,
        access: AccessStore | None = None,
        *,
        connection: IRCConnection | None = None,
    ) -> None:
        self.config = config if config is not None else ConfigStore()
        self.access = access if access is not None else AccessStore()
        self._conn = connection or IRCConnection()
        self._plugins: dict[str, Plugin] = {}
        self._handlers: dict[str, CommandHandler] = {}
        self._mailboxes: dict[str, PluginMailbox] = {}
        self._commands = TaskTracker()
        self._sealed = False
        self._disconnect_requested = False
        self._plugins_released = False

    @classmethod
    def create(
        cls,
        config_file: str | os.PathLike[str],
        access_file: str | os.PathLike[str] | None = None,
        *,
        connection: IRCConnection | None = None,
    ) -> IRCClient:
        """Load configuration and access files and register the built-in plugins.

        The ``conf`` and ``auth`` plugins save their stores back to disk
        when they are unregistered.
        """
        config_repo = ConfigRepository(config_file)
        access_repo = AccessRepository(access_file) if access_file else None
        access = access_repo.load_store() if access_repo else AccessStore()
        client = cls(config_repo.load(), access, connection=connection)
        client.register_plugin(BasicProtocolPlugin())
        client.register_plugin(ConfigPlugin(config_repo))
        client.register_plugin(AuthPlugin(access_repo))
        return client

    # ------------------------------------------------------------------ #
    # Derived state
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> ConnectionState:
        return self._conn.state

    @property
    def connection(self) -> IRCConnection:
        return self._conn

    @property
    def nick(self) -> str:
        """Current nickname (the configured one before registration)."""
        return self._conn.nick or self.config.get_string(SERVER_SECTION, "nick") or ""

    @property
    def trigger(self) -> str:
        return self.config.get_string(SERVER_SECTION, "trigger") or DEFAULT_TRIGGER

    @property
    def plugins(self) -> Mapping[str, Plugin]:
        return MappingProxyType(self._plugins)

    @property
    def handlers(self) -> Mapping[str, CommandHandler]:
        return MappingProxyType(self._handlers)

    # ------------------------------------------------------------------ #
    # Registration (build phase only)
    # ------------------------------------------------------------------ #
    def _ensure_open(self) -> None:
        if self._sealed:
            raise RegistrationClosedError(
                "Plugins and command handlers must be registered before connect()"
            )

    def register_plugin(self, plugin: Plugin) -> None:
        """Run the plugin's setup hook and record it under its name.

        Raises:
            DuplicatePluginError: A plugin with the same name exists.
            RegistrationClosedError: ``connect()`` was already called.
        """
        self._ensure_open()
        name = plugin.name
        if not name:
            raise ValueError("plugin name must not be empty")
        if name in self._plugins:
            raise DuplicatePluginError(name)
        plugin.register(self)
        self._plugins[name] = plugin
        logger.log_event("plugin", "registered", level=logging.DEBUG, plugin=name)

    def register_command_handler(
        self, command: str, min_params: int, min_access: int, plugin: Plugin
    ) -> None:
        """Bind ``command`` to ``plugin``. Only one plugin may own a command.

        Raises:
            DuplicateHandlerError: The command already has an owner.
            RegistrationClosedError: ``connect()`` was already called.
        """
        self._ensure_open()
        if min_params < 0 or min_access < 0:
            raise ValueError("min_params and min_access must be non-negative")
        existing = self._handlers.get(command)
        if existing is not None:
            raise DuplicateHandlerError(command, existing.owner.name)
        self._handlers[command] = CommandHandler(command, min_params, min_access, plugin)
        logger.log_event(
            "plugin",
            "handler_registered",
            level=logging.DEBUG,
            plugin=plugin.name,
            command=command,
        )

    def get_plugin(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    def iter_handlers(self) -> Iterator[CommandHandler]:
        return iter(list(self._handlers.values()))

    def get_usage(self, command: str) -> str:
        handler = self._handlers.get(command)
        if handler is None:
            return "no such command"
        return handler.owner.usage(command)

    # ------------------------------------------------------------------ #
    # Configuration and access delegation
    # ------------------------------------------------------------------ #
    def get_string_option(self, section: str, option: str) -> str | None:
        return self.config.get_string(section, option)

    def set_string_option(self, section: str, option: str, value: str) -> None:
        self.config.set_string(section, option, value)

    def remove_option(self, section: str, option: str) -> None:
        self.config.remove_option(section, option)

    def get_options(self, section: str) -> list[str]:
        return self.config.list_options(section)

    def get_int_option(self, section: str, option: str) -> int:
        return self.config.get_int(section, option)

    def set_int_option(self, section: str, option: str, value: int) -> None:
        self.config.set_int(section, option, value)

    def get_access_level(self, hostmask: str) -> int:
        return self.access.level_for(hostmask)

    def set_access_level(self, pattern: str, level: int) -> None:
        self.access.grant(pattern, level)

    def del_access_level(self, pattern: str) -> None:
        self.access.revoke(pattern)

    # ------------------------------------------------------------------ #
    # Connection lifecycle
    # ------------------------------------------------------------------ #
    async def connect(self) -> None:
        """Connect and register with the server.

        A nickname collision (433) retries with an extra underscore, and the
        accepted nickname is stored back into the ``Server`` section.

        Raises:
            ConfigError: The ``Server`` section is incomplete or invalid.
            TransportError: The transport could not be opened.
            RegistrationError: The connection ended before registration finished.
        """
        if self._disconnect_requested or self._plugins_released:
            raise RuntimeError("client has been shut down")
        settings = ServerSettings.from_store(self.config)
        self._sealed = True
        for name, plugin in self._plugins.items():
            mailbox = self._mailboxes.setdefault(name, PluginMailbox(plugin))
            mailbox.start()

        await self._conn.connect(settings.host, settings.port, tls=settings.tls)
        nick = await self._conn.register(
            settings.nick,
            settings.ident,
            settings.realname,
            on_event=self._notify_plugins,
            on_nick_change=lambda n: self.config.set_string(SERVER_SECTION, "nick", n),
        )
        logger.log_event("client", "connected", nick=nick, host=settings.host)

    async def input_loop(self) -> None:
        """Dispatch inbound lines until the connection ends.

        Returns normally after :meth:`disconnect`.

        Raises:
            TransportError: The connection failed or the server closed it.
        """
        while True:
            line = await self._conn.read_line()
            if line is None:
                break
            self.dispatch_line(line)

        if self._disconnect_requested:
            return
        error = self._conn.error or TransportError("Connection closed by server")
        logger.log_event(
            "client", "connection_lost", level=logging.ERROR, nick=self.nick, error=str(error)
        )
        self._conn.begin_shutdown()
        await self._release_plugins()
        await self._conn.close()
        self._close_mailboxes()
        raise error

    async def disconnect(self, reason: str = "") -> None:
        """Unregister every plugin, send QUIT and close the connection.

        Lines queued before (including those sent by unregister hooks) are
        flushed before QUIT. Makes :meth:`input_loop` return.
        """
        if self._disconnect_requested:
            return
        self._disconnect_requested = True
        logger.log_event("client", "disconnect_requested", nick=self.nick, reason=reason)
        self._conn.begin_shutdown()
        await self._release_plugins()
        await self._conn.quit(f"QUIT :{reason}")
        self._close_mailboxes()

    async def _release_plugins(self) -> None:
        if self._plugins_released:
            return
        self._plugins_released = True
        for plugin in self._plugins.values():
            await call_hook(plugin, "unregister")
            logger.log_event("plugin", "unregistered", level=logging.DEBUG, plugin=plugin.name)

    def _close_mailboxes(self) -> None:
        for mailbox in self._mailboxes.values():
            mailbox.close()

    async def wait_idle(self) -> None:
        """Wait until queued notifications and running commands are done."""
        for mailbox in list(self._mailboxes.values()):
            await mailbox.join()
        await self._commands.join()

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #
    def _notify_plugins(self, event: IRCEvent) -> None:
        for mailbox in self._mailboxes.values():
            mailbox.deliver(event)

    def dispatch_line(self, line: str) -> None:
        """Fan ``line`` out to every plugin and route a trigger command.

        Never blocks: plugin hooks are scheduled, not awaited.
        """
        event = parse_event(line)
        if event is None:
            logger.log_event("dispatch", "malformed_line", level=logging.DEBUG, raw=line)
            return

        self._notify_plugins(event)

        trigger = self.trigger
        if not is_message_verb(event.command) or not event.args:
            return
        if not event.args[0].startswith(trigger):
            return
        cmd = parse_command(event, trigger)
        if cmd is None:
            return

        handler = self._handlers.get(cmd.command)
        if handler is None:
            return

        if handler.min_access > 0 and self.get_access_level(cmd.source) < handler.min_access:
            logger.log_event(
                "dispatch",
                "command_denied",
                level=logging.WARNING,
                command=cmd.command,
                source=cmd.source,
                required=handler.min_access,
            )
            self.reply(cmd, UNAUTHORIZED_REPLY)
            return
        if len(cmd.args) < handler.min_params:
            self.reply(cmd, self.get_usage(cmd.command))
            return

        logger.log_event(
            "dispatch",
            "command_dispatched",
            level=logging.DEBUG,
            command=cmd.command,
            plugin=handler.owner.name,
            source=cmd.source,
        )
        self._commands.spawn(
            lambda: call_hook(handler.owner, "process_command", cmd),
            name=f"command-{cmd.command}",
        )

    # ------------------------------------------------------------------ #
    # Output
    # ------------------------------------------------------------------ #
    def send_line(self, line: str) -> bool:
        """Queue a raw protocol line (CR/LF stripped, cut to 510 bytes)."""
        return self._conn.send_line(line)

    async def send(self, line: str) -> bool:
        return await self._conn.send(line)

    def _reply_target(self, target: str, source: str) -> str:
        if target != self.nick:
            return target
        return nick_of(source)

    def reply(self, cmd: IRCCommand, message: str) -> bool:
        """Send a NOTICE to the channel, or to the sender for private messages."""
        return self.send_line(build_notice(self._reply_target(cmd.target, cmd.source), message))

    def reply_to_event(self, event: IRCEvent, message: str) -> bool:
        return self.send_line(build_notice(self._reply_target(event.target, event.source), message))
