"""IRC protocol package.

Contains the line codec, shared models and the server connection.
"""

from .connection import IRCConnection  # noqa: F401
from .models import (  # noqa: F401
    MESSAGE_VERBS,
    AccessEntry,
    ConnectionState,
    IRCCommand,
    IRCEvent,
    nick_of,
)
from .parser import (  # noqa: F401
    build_notice,
    build_privmsg,
    is_message_verb,
    parse_command,
    parse_event,
    sanitize_line,
)

__all__ = [
    "MESSAGE_VERBS",
    "AccessEntry",
    "ConnectionState",
    "IRCCommand",
    "IRCConnection",
    "IRCEvent",
    "build_notice",
    "build_privmsg",
    "is_message_verb",
    "nick_of",
    "parse_command",
    "parse_event",
    "sanitize_line",
]
