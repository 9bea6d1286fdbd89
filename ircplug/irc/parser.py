"""IRC line parsing and outbound line construction."""

from __future__ import annotations

from ..constants import MAX_LINE_BYTES
from .models import MESSAGE_VERBS, IRCCommand, IRCEvent


def is_message_verb(verb: str) -> bool:
    return verb in MESSAGE_VERBS


def parse_event(raw_line: str) -> IRCEvent | None:
    """Parse ``[:source] command [params...] [:trailing]`` into an event.

    Returns None for empty lines and lines without a command token; never
    raises on malformed input.
    """
    line = raw_line.rstrip("\r\n")
    if not line.strip():
        return None

    source = ""
    if line.startswith(":"):
        if " " not in line:
            return None
        source, line = line[1:].split(" ", 1)

    trailing: str | None = None
    if line.startswith(":"):
        return None
    if " :" in line:
        line, trailing = line.split(" :", 1)

    parts = [p for p in line.split(" ") if p]
    if not parts:
        return None
    command = parts[0]
    if command.isalpha():
        command = command.upper()
    params = parts[1:]
    if trailing is not None:
        params.append(trailing)

    target = params[0] if params else ""
    return IRCEvent(
        source=source, command=command, target=target, args=tuple(params[1:])
    )


def parse_command(event: IRCEvent, trigger: str) -> IRCCommand | None:
    """Extract a trigger command from a PRIVMSG/NOTICE event.

    The message text is split on spaces: the first word, minus the trigger,
    is the command and the remaining words are its arguments.
    """
    if not is_message_verb(event.command) or not event.args or not trigger:
        return None
    text = event.args[0]
    if not text.startswith(trigger):
        return None
    words = [w for w in text.split(" ") if w]
    if not words:
        return None
    verb = words[0][len(trigger):]
    if not verb:
        return None
    return IRCCommand(
        source=event.source, target=event.target, command=verb, args=tuple(words[1:])
    )


def sanitize_line(text: str) -> str:
    """Make ``text`` safe to put on the wire as a single protocol line.

    Embedded CR/LF become spaces and the result is cut to ``MAX_LINE_BYTES``
    UTF-8 bytes without splitting a multi-byte character.
    """
    line = text.replace("\r", " ").replace("\n", " ")
    encoded = line.encode("utf-8")
    if len(encoded) <= MAX_LINE_BYTES:
        return line
    return encoded[:MAX_LINE_BYTES].decode("utf-8", errors="ignore")


def build_notice(target: str, message: str) -> str:
    return f"NOTICE {target} :{message}"


def build_privmsg(target: str, message: str) -> str:
    return f"PRIVMSG {target} :{message}"
