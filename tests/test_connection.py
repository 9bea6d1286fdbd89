from __future__ import annotations

import asyncio

import pytest

from ircplug.errors import RegistrationError, TransportError
from ircplug.irc.models import ConnectionState
from tests.fixtures.fake_server import FakeServer, make_connection


@pytest.mark.asyncio
async def test_connect_failure_raises_transport_error():
    server = FakeServer(fail_connects=1)
    conn = make_connection(server, attempts=1)
    with pytest.raises(TransportError):
        await conn.connect("irc.example.net", 6667)
    assert conn.state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_connect_retries_before_giving_up():
    server = FakeServer(fail_connects=1)
    conn = make_connection(server, attempts=2)
    await conn.connect("irc.example.net", 6667)
    assert len(server.opened) == 2
    assert conn.state == ConnectionState.REGISTERING
    await conn.close()


@pytest.mark.asyncio
async def test_register_sends_nick_and_user_then_completes_on_welcome():
    server = FakeServer()
    conn = make_connection(server)
    await conn.connect("irc.example.net", 6667)
    server.feed(":irc.example.net 001 bot :Welcome")
    nick = await conn.register("bot", "plug", "Plug Bot")
    assert nick == "bot"
    assert conn.state == ConnectionState.REGISTERED
    await server.wait_for(lambda line: line.startswith("USER"))
    assert server.written[:2] == ["NICK bot", "USER plug 0 * :Plug Bot"]
    await conn.close()


@pytest.mark.asyncio
async def test_nick_collisions_accumulate_underscores():
    server = FakeServer()
    conn = make_connection(server)
    await conn.connect("irc.example.net", 6667)
    server.feed(
        ":irc.example.net 433 * bot :Nickname is already in use",
        ":irc.example.net 433 * bot_ :Nickname is already in use",
        ":irc.example.net 001 bot__ :Welcome",
    )
    persisted: list[str] = []
    nick = await conn.register("bot", "plug", "Plug Bot", on_nick_change=persisted.append)
    assert nick == "bot__"
    assert persisted == ["bot_", "bot__"]
    await server.wait_for(lambda line: line == "NICK bot__")
    nick_lines = [line for line in server.written if line.startswith("NICK")]
    assert nick_lines == ["NICK bot", "NICK bot_", "NICK bot__"]
    await conn.close()


@pytest.mark.asyncio
async def test_welcome_ends_handshake_once_and_leaves_later_lines_for_reader():
    server = FakeServer()
    conn = make_connection(server)
    await conn.connect("irc.example.net", 6667)
    server.feed(
        ":irc.example.net 001 bot :Welcome",
        ":irc.example.net 001 bot :Welcome again",
        ":irc.example.net 433 * bot :late collision",
    )
    seen = []
    nick = await conn.register("bot", "plug", "Plug Bot", on_event=seen.append)
    assert nick == "bot"
    assert [e.command for e in seen] == ["001"]
    assert await conn.read_line() == ":irc.example.net 001 bot :Welcome again"
    assert await conn.read_line() == ":irc.example.net 433 * bot :late collision"
    assert conn.nick == "bot"
    await conn.close()


@pytest.mark.asyncio
async def test_lines_before_welcome_reach_observer():
    server = FakeServer()
    conn = make_connection(server)
    await conn.connect("irc.example.net", 6667)
    server.feed(
        "PING :irc.example.net",
        ":irc.example.net :no command here",
        "NOTICE AUTH :*** Looking up your hostname",
        ":irc.example.net 001 bot :hi",
    )
    seen = []
    await conn.register("bot", "plug", "Plug Bot", on_event=seen.append)
    assert [e.command for e in seen] == ["PING", "NOTICE", "001"]
    await conn.close()


@pytest.mark.asyncio
async def test_eof_during_registration_raises_registration_error():
    server = FakeServer()
    conn = make_connection(server)
    await conn.connect("irc.example.net", 6667)
    server.feed(":irc.example.net NOTICE * :Looking up your hostname")
    server.hangup()
    with pytest.raises(RegistrationError):
        await conn.register("bot", "plug", "Plug Bot")
    assert conn.state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_send_line_sanitizes_before_writing():
    server = FakeServer()
    conn = make_connection(server)
    await conn.connect("irc.example.net", 6667)
    assert conn.send_line("PRIVMSG #c :hi\nQUIT :owned") is True
    assert conn.send_line("PRIVMSG #c :" + "y" * 700) is True
    long_line = await server.wait_for(lambda line: line.endswith("y"))
    injected = await server.wait_for(lambda line: "owned" in line)
    assert injected == "PRIVMSG #c :hi QUIT :owned"
    assert len(long_line.encode()) == 510
    assert all(not line.startswith("QUIT") for line in server.written)
    await conn.close()


@pytest.mark.asyncio
async def test_send_line_from_worker_thread():
    server = FakeServer()
    conn = make_connection(server)
    await conn.connect("irc.example.net", 6667)
    assert await asyncio.to_thread(conn.send_line, "PRIVMSG #c :from thread") is True
    await server.wait_for(lambda line: line == "PRIVMSG #c :from thread")
    await conn.close()


@pytest.mark.asyncio
async def test_send_line_when_disconnected_is_dropped():
    server = FakeServer()
    conn = make_connection(server)
    assert conn.send_line("PRIVMSG #c :nobody home") is False
    assert await conn.send("PRIVMSG #c :nobody home") is False
    assert server.written == []


@pytest.mark.asyncio
async def test_quit_flushes_queue_before_quit_and_closes():
    server = FakeServer()
    conn = make_connection(server)
    await conn.connect("irc.example.net", 6667)
    for i in range(5):
        conn.send_line(f"PRIVMSG #c :{i}")
    await conn.quit("QUIT :bye")
    assert server.written == [f"PRIVMSG #c :{i}" for i in range(5)] + ["QUIT :bye"]
    assert conn.state == ConnectionState.DISCONNECTED
    assert await conn.read_line() is None
    assert conn.error is None
    assert conn.send_line("PRIVMSG #c :late") is False


@pytest.mark.asyncio
async def test_server_hangup_ends_input():
    server = FakeServer()
    conn = make_connection(server)
    await conn.connect("irc.example.net", 6667)
    server.feed(":a!b@c PRIVMSG #c :last words")
    server.hangup()
    assert await conn.read_line() == ":a!b@c PRIVMSG #c :last words"
    assert await conn.read_line() is None
    assert await conn.read_line() is None
    await conn.close()
