from __future__ import annotations

import asyncio
import json

import pytest

from ircplug.access import AccessRepository
from ircplug.client import IRCClient
from ircplug.config import ConfigRepository, ConfigStore
from ircplug.errors import ConfigError, RegistrationError, TransportError
from ircplug.irc.models import ConnectionState
from ircplug.plugins.base import Plugin
from ircplug.plugins.builtin import BasicProtocolPlugin
from tests.fixtures.fake_server import (
    FakeServer,
    connected_client,
    make_client,
    make_connection,
)


class Farewell(Plugin):
    """Counts unregister calls and says goodbye on the way out."""

    name = "farewell"

    def __init__(self) -> None:
        self.unregistered = 0

    def unregister(self):
        self.unregistered += 1
        self.client.send_line("PRIVMSG #chan :goodbye")


class AsyncFarewell(Plugin):
    name = "async-farewell"

    def __init__(self) -> None:
        self.unregistered = 0

    async def unregister(self):
        self.unregistered += 1


@pytest.mark.asyncio
async def test_connect_registers_and_reports_state():
    server = FakeServer()
    client = await connected_client(server)
    assert client.state == ConnectionState.REGISTERED
    assert client.nick == "bot"
    assert server.opened[0][:2] == ("irc.example.net", 6667)
    await client.disconnect()


@pytest.mark.asyncio
async def test_nick_collision_is_persisted_to_config():
    server = FakeServer()
    client = make_client(server)
    server.feed(
        ":irc.example.net 433 * bot :Nickname is already in use",
        ":irc.example.net 001 bot_ :Welcome",
    )
    await client.connect()
    assert client.nick == "bot_"
    assert client.get_string_option("Server", "nick") == "bot_"
    await client.disconnect()


@pytest.mark.asyncio
async def test_incomplete_server_section_fails_before_connecting():
    server = FakeServer()
    client = make_client(server, config=ConfigStore({"Server": {"host": "irc.example.net"}}))
    with pytest.raises(ConfigError):
        await client.connect()
    assert server.opened == []


@pytest.mark.asyncio
async def test_connect_failure_propagates_transport_error():
    server = FakeServer(fail_connects=1)
    client = make_client(server)
    with pytest.raises(TransportError):
        await client.connect()
    assert client.state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_hangup_during_registration_raises():
    server = FakeServer()
    client = make_client(server)
    server.hangup()
    with pytest.raises(RegistrationError):
        await client.connect()


@pytest.mark.asyncio
async def test_disconnect_unregisters_each_plugin_once_before_quit():
    server = FakeServer()
    farewell = Farewell()
    other = AsyncFarewell()
    client = await connected_client(server, farewell, other)

    await client.disconnect("see you")
    await client.disconnect("again")

    assert farewell.unregistered == 1
    assert other.unregistered == 1
    assert server.written[-2:] == ["PRIVMSG #chan :goodbye", "QUIT :see you"]
    assert server.written.count("QUIT :see you") == 1
    assert client.state == ConnectionState.DISCONNECTED
    assert client.send_line("PRIVMSG #chan :too late") is False


@pytest.mark.asyncio
async def test_input_loop_returns_after_disconnect():
    server = FakeServer()
    client = await connected_client(server)
    loop_task = asyncio.create_task(client.input_loop())
    await asyncio.sleep(0)

    await client.disconnect("bye")
    assert await asyncio.wait_for(loop_task, timeout=2) is None


@pytest.mark.asyncio
async def test_server_hangup_raises_and_unregisters_plugins():
    server = FakeServer()
    farewell = AsyncFarewell()
    client = await connected_client(server, farewell)
    loop_task = asyncio.create_task(client.input_loop())

    server.hangup()
    with pytest.raises(TransportError):
        await asyncio.wait_for(loop_task, timeout=2)
    assert farewell.unregistered == 1
    assert client.state == ConnectionState.DISCONNECTED

    await client.disconnect()
    assert farewell.unregistered == 1


@pytest.mark.asyncio
async def test_client_cannot_reconnect_after_shutdown():
    server = FakeServer()
    client = await connected_client(server)
    await client.disconnect()
    with pytest.raises(RuntimeError):
        await client.connect()


@pytest.mark.asyncio
async def test_ping_is_answered_with_pong():
    server = FakeServer()
    client = await connected_client(server, BasicProtocolPlugin())
    loop_task = asyncio.create_task(client.input_loop())

    server.feed("PING :irc.example.net")
    await server.wait_for(lambda line: line == "PONG :irc.example.net")

    await client.disconnect()
    await asyncio.wait_for(loop_task, timeout=2)


@pytest.mark.asyncio
async def test_ping_during_registration_is_answered():
    server = FakeServer()
    client = make_client(server)
    client.register_plugin(BasicProtocolPlugin())
    server.feed("PING :12345", ":irc.example.net 001 bot :Welcome")
    await client.connect()
    await server.wait_for(lambda line: line == "PONG :12345")
    await client.disconnect()


@pytest.mark.asyncio
async def test_create_loads_files_and_saves_them_on_disconnect(tmp_path):
    conf_path = tmp_path / "ircplug.json"
    auth_path = tmp_path / "auth.json"
    conf_path.write_text(
        json.dumps(
            {"Server": {"host": "irc.example.net", "nick": "bot", "trigger": "!"}}
        )
    )
    auth_path.write_text(json.dumps({"entries": [{"pattern": "admin!.*", "level": 500}]}))

    server = FakeServer()
    client = IRCClient.create(conf_path, auth_path, connection=make_connection(server))
    assert sorted(client.plugins) == ["auth", "basic", "conf"]
    assert client.get_access_level("admin!a@b") == 500

    client.set_access_level(r".*@trusted\.net", 200)
    server.feed(
        ":irc.example.net 433 * bot :Nickname is already in use",
        ":irc.example.net 001 bot_ :Welcome",
    )
    await client.connect()
    await client.disconnect("bye")

    saved_config = ConfigRepository(conf_path).load()
    assert saved_config.get_string("Server", "nick") == "bot_"
    saved_access = AccessRepository(auth_path).load_store()
    assert saved_access.level_for("x!y@trusted.net") == 200
    assert saved_access.level_for("admin!a@b") == 500


class StateAtUnregister(Plugin):
    name = "state-recorder"

    def __init__(self) -> None:
        self.states = []

    async def unregister(self):
        self.states.append(self.client.state)


@pytest.mark.asyncio
async def test_server_hangup_passes_through_shutting_down():
    server = FakeServer()
    watcher = StateAtUnregister()
    client = await connected_client(server, watcher)
    loop_task = asyncio.create_task(client.input_loop())

    server.hangup()
    with pytest.raises(TransportError):
        await asyncio.wait_for(loop_task, timeout=2)
    assert watcher.states == [ConnectionState.SHUTTING_DOWN]
    assert client.state == ConnectionState.DISCONNECTED
