from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..constants import DEFAULT_TRIGGER, IRC_DEFAULT_PORT
from ..errors.internal import ConfigError
from .store import ConfigStore

SERVER_SECTION = "Server"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def split_hostport(value: str) -> tuple[str, int]:
    """Split ``host:port`` (port optional) into its parts."""
    host, sep, port = value.strip().rpartition(":")
    if not sep:
        return value.strip(), IRC_DEFAULT_PORT
    if not port.isdigit():
        raise ValueError(f"invalid port in {value!r}")
    return host, int(port)


class ServerSettings(BaseModel):
    """Validated view of the ``Server`` config section.

    Attributes:
        host: Server host name.
        port: Server TCP port.
        nick: Initial nickname (updated in the store on 433 retries).
        ident: User name sent with USER.
        realname: Real name sent with USER.
        trigger: Prefix marking a chat message as a command.
        tls: Whether to wrap the connection in TLS.
    """

    host: str = Field(min_length=1)
    port: int = Field(default=IRC_DEFAULT_PORT, ge=1, le=65535)
    nick: str = Field(min_length=1)
    ident: str = ""
    realname: str = ""
    trigger: str = DEFAULT_TRIGGER
    tls: bool = False

    @field_validator("nick", "ident", "trigger")
    @classmethod
    def validate_no_spaces(cls, v: str) -> str:
        if " " in v:
            raise ValueError("must not contain spaces")
        return v

    @field_validator("tls", mode="before")
    @classmethod
    def validate_tls(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in _TRUE_VALUES
        return bool(v)

    @model_validator(mode="after")
    def fill_defaults(self) -> ServerSettings:
        """USER needs both fields; fall back to the nickname."""
        if not self.ident:
            self.ident = self.nick
        if not self.realname:
            self.realname = self.nick
        return self

    @classmethod
    def from_store(cls, store: ConfigStore) -> ServerSettings:
        """Build settings from the ``Server`` section.

        ``host`` may carry the port as ``host:port``; an explicit ``port``
        option wins.

        Raises:
            ConfigError: If required options are missing or invalid.
        """
        data: dict[str, Any] = {}
        for option in ("nick", "ident", "realname", "trigger", "tls", "port"):
            value = store.get_string(SERVER_SECTION, option)
            if value is not None:
                data[option] = value
        hostport = store.get_string(SERVER_SECTION, "host") or ""
        try:
            host, port = split_hostport(hostport)
            data["host"] = host
            data.setdefault("port", port)
            return cls.model_validate(data)
        except (ValidationError, ValueError) as e:
            raise ConfigError(f"Invalid [{SERVER_SECTION}] configuration: {e}") from e
