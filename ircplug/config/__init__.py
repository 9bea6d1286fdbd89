"""Configuration store, persistence and validation."""

from .model import SERVER_SECTION, ServerSettings, split_hostport  # noqa: F401
from .repository import ConfigRepository  # noqa: F401
from .store import ConfigStore  # noqa: F401

__all__ = [
    "SERVER_SECTION",
    "ConfigRepository",
    "ConfigStore",
    "ServerSettings",
    "split_hostport",
]
