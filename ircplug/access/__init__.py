"""Access control: hostmask patterns mapped to authorization levels."""

from .repository import AccessRepository  # noqa: F401
from .store import AccessStore  # noqa: F401

__all__ = ["AccessRepository", "AccessStore"]
