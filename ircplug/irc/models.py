"""Shared IRC data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

MESSAGE_VERBS = frozenset({"PRIVMSG", "NOTICE"})


class ConnectionState(Enum):
    DISCONNECTED = auto()
    CONNECTING = auto()
    REGISTERING = auto()
    REGISTERED = auto()
    SHUTTING_DOWN = auto()


def nick_of(hostmask: str) -> str:
    """Return the nickname part of a ``nick!user@host`` mask."""
    return hostmask.split("!", 1)[0]


@dataclass(frozen=True, slots=True)
class IRCEvent:
    """One parsed protocol line.

    ``target`` is the first parameter (channel or nickname) and ``args``
    holds the remaining parameters exactly as they appeared on the wire.
    """

    source: str
    command: str
    target: str = ""
    args: tuple[str, ...] = field(default_factory=tuple)

    @property
    def nick(self) -> str:
        return nick_of(self.source)


@dataclass(frozen=True, slots=True)
class IRCCommand:
    """A user command extracted from a PRIVMSG/NOTICE starting with the trigger."""

    source: str
    target: str
    command: str
    args: tuple[str, ...] = field(default_factory=tuple)

    @property
    def nick(self) -> str:
        return nick_of(self.source)


@dataclass(frozen=True, slots=True)
class AccessEntry:
    pattern: str
    level: int
