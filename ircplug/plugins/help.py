from __future__ import annotations

from typing import TYPE_CHECKING

from .base import Plugin

if TYPE_CHECKING:  # pragma: no cover
    from ..client import IRCClient
    from ..irc.models import IRCCommand


class HelpPlugin(Plugin):
    """Lists registered commands and shows their usage."""

    name = "help"
    info = "lists commands and their usage"

    def register(self, client: IRCClient) -> None:
        super().register(client)
        client.register_command_handler("help", 0, 0, self)

    def usage(self, command: str) -> str:
        return "help [command]"

    async def process_command(self, cmd: IRCCommand) -> None:
        client = self.client
        if client is None:
            return
        if cmd.args:
            wanted = cmd.args[0].removeprefix(client.trigger)
            if wanted not in client.handlers:
                client.reply(cmd, client.get_usage(wanted))
                return
            usage = client.get_usage(wanted) or wanted
            client.reply(cmd, f"{client.trigger}{usage}")
            return
        names = sorted(h.command for h in client.iter_handlers())
        client.reply(cmd, "Commands: " + ", ".join(client.trigger + n for n in names))
