"""Plugin interface and the plugins shipped with the client."""

from .admin import AdminPlugin  # noqa: F401
from .base import Plugin  # noqa: F401
from .builtin import AuthPlugin, BasicProtocolPlugin, ConfigPlugin  # noqa: F401
from .help import HelpPlugin  # noqa: F401

__all__ = [
    "AdminPlugin",
    "AuthPlugin",
    "BasicProtocolPlugin",
    "ConfigPlugin",
    "HelpPlugin",
    "Plugin",
]
