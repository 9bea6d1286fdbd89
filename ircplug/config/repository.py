from __future__ import annotations

import logging
from typing import Any

from ..errors.internal import ConfigError
from .json_file import JsonFileRepository
from .store import ConfigStore


class ConfigRepository(JsonFileRepository):
    """Repository for the client configuration file.

    The file holds ``{"sections": {section: {option: value}}}``. A bare
    mapping of sections is accepted on load as well.
    """

    def load_raw(self) -> dict[str, dict[str, str]]:
        """Load raw sections from the file.

        Returns:
            Mapping of section name to option mapping; empty if the file is missing.

        Raises:
            ConfigError: If the file exists but cannot be parsed.
        """
        try:
            data: Any = self.read_json()
        except (OSError, ValueError) as e:
            logging.error(f"Configuration load error: {e}")
            raise ConfigError(f"Cannot read configuration {self.path}: {e}") from e
        if data is None:
            return {}
        if isinstance(data, dict) and isinstance(data.get("sections"), dict):
            data = data["sections"]
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration {self.path} must be a JSON object")
        sections: dict[str, dict[str, str]] = {}
        for section, options in data.items():
            if not isinstance(options, dict):
                logging.warning(f"Ignoring malformed config section {section!r}")
                continue
            sections[str(section)] = {
                str(k): "" if v is None else str(v) for k, v in options.items()
            }
        return sections

    def load(self) -> ConfigStore:
        return ConfigStore(self.load_raw())

    def save(self, store: ConfigStore) -> bool:
        return self.write_json({"sections": store.to_dict()})
