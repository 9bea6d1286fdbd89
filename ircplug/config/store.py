"""Section/option configuration store."""

from __future__ import annotations

import threading
from collections.abc import Mapping

from ..errors.internal import ConfigError


class ConfigStore:
    """Thread-safe ``section -> option -> value`` string store.

    Empty values are treated as absent: ``get_string`` returns None for both.
    Sections are created on first write and never removed implicitly.
    """

    def __init__(self, data: Mapping[str, Mapping[str, str]] | None = None) -> None:
        self._lock = threading.RLock()
        self._sections: dict[str, dict[str, str]] = {}
        for section, options in (data or {}).items():
            self._sections[section] = {k: str(v) for k, v in options.items()}

    def get_string(self, section: str, option: str) -> str | None:
        with self._lock:
            value = self._sections.get(section, {}).get(option)
        return value or None

    def set_string(self, section: str, option: str, value: str) -> None:
        with self._lock:
            self._sections.setdefault(section, {})[option] = value

    def remove_option(self, section: str, option: str) -> None:
        """Remove one option; the (possibly empty) section is kept."""
        with self._lock:
            self._sections.get(section, {}).pop(option, None)

    def list_options(self, section: str) -> list[str]:
        with self._lock:
            return list(self._sections.get(section, {}))

    def get_int(self, section: str, option: str, default: int | None = None) -> int:
        """Return an integer option.

        Raises:
            ConfigError: If the option is absent (and no default is given)
                or is not an integer.
        """
        value = self.get_string(section, option)
        if value is None:
            if default is not None:
                return default
            raise ConfigError(
                f"Missing option {section}.{option}",
                data={"section": section, "option": option},
            )
        try:
            return int(value)
        except ValueError as e:
            raise ConfigError(
                f"Option {section}.{option} is not an integer: {value!r}",
                data={"section": section, "option": option},
            ) from e

    def set_int(self, section: str, option: str, value: int) -> None:
        self.set_string(section, option, str(int(value)))

    def sections(self) -> list[str]:
        with self._lock:
            return list(self._sections)

    def to_dict(self) -> dict[str, dict[str, str]]:
        with self._lock:
            return {s: dict(opts) for s, opts in self._sections.items()}
