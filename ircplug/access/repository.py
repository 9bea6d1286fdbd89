"""JSON persistence for the access database."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..config.json_file import JsonFileRepository
from ..errors.internal import ConfigError
from ..irc.models import AccessEntry
from .store import AccessStore


class AccessRecord(BaseModel):
    """One persisted access entry."""

    pattern: str = Field(min_length=1)
    level: int = Field(ge=0)


class AccessDocument(BaseModel):
    entries: list[AccessRecord] = Field(default_factory=list)


class AccessRepository(JsonFileRepository):
    """Loads and saves access entries as ``{"entries": [{pattern, level}]}``."""

    def load(self) -> list[AccessEntry]:
        try:
            raw: Any = self.read_json()
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot read access database {self.path}: {e}") from e
        if raw is None:
            return []
        try:
            doc = AccessDocument.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid access database {self.path}: {e}") from e
        return [AccessEntry(pattern=r.pattern, level=r.level) for r in doc.entries]

    def load_store(self) -> AccessStore:
        return AccessStore(self.load())

    def save(self, entries: list[AccessEntry]) -> bool:
        doc = AccessDocument(
            entries=[AccessRecord(pattern=e.pattern, level=e.level) for e in entries]
        )
        return self.write_json(doc.model_dump())

    def save_store(self, store: AccessStore) -> bool:
        return self.save(store.entries())
