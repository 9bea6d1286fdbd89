from __future__ import annotations

import pytest

from ircplug.client import IRCClient
from ircplug.errors import (
    DuplicateHandlerError,
    DuplicatePluginError,
    RegistrationClosedError,
)
from ircplug.plugins.base import Plugin
from tests.fixtures.fake_server import FakeServer, connected_client


class EchoPlugin(Plugin):
    name = "echo"

    def __init__(self, commands=("echo",)) -> None:
        self.commands = commands
        self.register_calls = 0

    def register(self, client):
        super().register(client)
        self.register_calls += 1
        for command in self.commands:
            client.register_command_handler(command, 1, 0, self)

    def usage(self, command: str) -> str:
        return f"{command} <text>"


class OtherEcho(EchoPlugin):
    name = "other"


def test_register_plugin_runs_setup_hook():
    client = IRCClient()
    plugin = EchoPlugin()
    client.register_plugin(plugin)
    assert plugin.register_calls == 1
    assert plugin.client is client
    assert client.get_plugin("echo") is plugin
    assert list(client.plugins) == ["echo"]


def test_duplicate_plugin_name_rejected_first_kept():
    client = IRCClient()
    first = EchoPlugin()
    client.register_plugin(first)
    second = EchoPlugin(commands=("shout",))
    with pytest.raises(DuplicatePluginError):
        client.register_plugin(second)
    assert client.get_plugin("echo") is first
    assert second.register_calls == 0
    assert "shout" not in client.handlers


def test_duplicate_handler_rejected_first_stays_bound():
    client = IRCClient()
    first = EchoPlugin()
    client.register_plugin(first)
    with pytest.raises(DuplicateHandlerError) as exc_info:
        client.register_plugin(OtherEcho())
    assert exc_info.value.owner == "echo"
    assert client.handlers["echo"].owner is first


def test_direct_duplicate_handler_call_fails():
    client = IRCClient()
    plugin = EchoPlugin(commands=())
    client.register_command_handler("x", 0, 0, plugin)
    with pytest.raises(DuplicateHandlerError):
        client.register_command_handler("x", 2, 100, plugin)
    assert client.handlers["x"].min_params == 0


def test_negative_limits_rejected():
    client = IRCClient()
    with pytest.raises(ValueError):
        client.register_command_handler("x", -1, 0, EchoPlugin(commands=()))


def test_handler_table_is_read_only():
    client = IRCClient()
    client.register_plugin(EchoPlugin())
    with pytest.raises(TypeError):
        client.handlers["new"] = None  # type: ignore[index]


def test_usage_lookup_and_iteration():
    client = IRCClient()
    client.register_plugin(EchoPlugin(commands=("echo", "shout")))
    assert client.get_usage("shout") == "shout <text>"
    assert client.get_usage("missing") == "no such command"
    assert sorted(h.command for h in client.iter_handlers()) == ["echo", "shout"]


@pytest.mark.asyncio
async def test_registration_closed_after_connect():
    server = FakeServer()
    client = await connected_client(server, EchoPlugin())
    with pytest.raises(RegistrationClosedError):
        client.register_plugin(OtherEcho(commands=()))
    with pytest.raises(RegistrationClosedError):
        client.register_command_handler("late", 0, 0, client.get_plugin("echo"))
    await client.disconnect("bye")


def test_store_delegation():
    client = IRCClient()
    client.set_string_option("Plugins", "greeting", "hi")
    client.set_int_option("Plugins", "count", 3)
    assert client.get_string_option("Plugins", "greeting") == "hi"
    assert client.get_int_option("Plugins", "count") == 3
    assert client.get_options("Plugins") == ["greeting", "count"]
    client.remove_option("Plugins", "greeting")
    assert client.get_options("Plugins") == ["count"]

    client.set_access_level("admin!.*", 500)
    assert client.get_access_level("admin!x@y") == 500
    client.del_access_level("admin!.*")
    assert client.get_access_level("admin!x@y") == 0
