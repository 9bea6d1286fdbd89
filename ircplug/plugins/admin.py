"""Commands for bot administrators."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..irc.parser import build_notice, build_privmsg
from .base import Plugin

if TYPE_CHECKING:  # pragma: no cover
    from ..client import IRCClient
    from ..irc.models import IRCCommand, IRCEvent

AUTO_OP_LEVEL = 200

# command -> (min params, min access, usage)
COMMANDS: dict[str, tuple[int, int, str]] = {
    "inviteme": (1, 400, "inviteme <channelname>"),
    "say": (2, 500, "say <channelname> <message>"),
    "notice": (2, 500, "notice <channelname> <message>"),
    "action": (2, 500, "action <channelname> <message>"),
}


class AdminPlugin(Plugin):
    name = "admin"
    info = "provides commands for bot-admins"

    def register(self, client: IRCClient) -> None:
        super().register(client)
        for command, (min_params, min_access, _) in COMMANDS.items():
            client.register_command_handler(command, min_params, min_access, self)

    def usage(self, command: str) -> str:
        return COMMANDS.get(command, (0, 0, ""))[2]

    async def process_line(self, event: IRCEvent) -> None:
        # Auto-op trusted users joining a channel.
        if event.command != "JOIN" or self.client is None:
            return
        if event.nick == self.client.nick:
            return
        if self.client.get_access_level(event.source) >= AUTO_OP_LEVEL:
            await self.client.send(f"MODE {event.target} +o {event.nick}")

    async def process_command(self, cmd: IRCCommand) -> None:
        if self.client is None:
            return
        channel, text = cmd.args[0], " ".join(cmd.args[1:])
        match cmd.command:
            case "inviteme":
                await self.client.send(f"INVITE {cmd.nick} {channel}")
            case "say":
                await self.client.send(build_privmsg(channel, text))
            case "notice":
                await self.client.send(build_notice(channel, text))
            case "action":
                await self.client.send(build_privmsg(channel, f"\x01ACTION {text}\x01"))
