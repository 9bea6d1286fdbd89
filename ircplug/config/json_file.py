from __future__ import annotations

import fcntl
import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any


class JsonFileRepository:
    """Base class for small JSON documents written atomically.

    Saves are skipped when the payload checksum matches the last write, and
    every write goes through a temp file plus rename under an exclusive lock.
    """

    def __init__(self, path: str | os.PathLike[str]):
        if not isinstance(path, str | os.PathLike):
            raise TypeError("path must be str or os.PathLike")
        self.path = str(path)
        self._last_checksum: str | None = None

    def read_json(self) -> Any | None:
        """Return the decoded document, or None when the file does not exist."""
        try:
            with open(self.path, encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None

    @staticmethod
    def _compute_checksum(data: Any) -> str:
        payload = json.dumps(
            data, sort_keys=True, separators=(",", ":"), default=str
        ).encode()
        return hashlib.sha256(payload).hexdigest()

    def write_json(self, data: Any) -> bool:
        """Write ``data`` to disk.

        Returns:
            True if the file was written, False if skipped due to no changes.
        """
        checksum = self._compute_checksum(data)
        if self._last_checksum == checksum:
            logging.debug(f"Skipped save (checksum match) path={self.path}")
            return False
        self._prepare_dir()
        self._atomic_write(data)
        self._last_checksum = checksum
        return True

    def _prepare_dir(self) -> None:
        config_dir = os.path.dirname(self.path)
        if config_dir and not os.path.exists(config_dir):
            os.makedirs(config_dir, exist_ok=True)

    def _atomic_write(self, data: Any) -> None:
        target = Path(self.path)
        lock_path = target.with_suffix(target.suffix + ".lock")
        temp_path: str | None = None
        try:
            with open(lock_path, "w", encoding="utf-8") as lock_file:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
                with tempfile.NamedTemporaryFile(
                    mode="w",
                    dir=target.parent,
                    prefix=f".{target.name}.",
                    suffix=".tmp",
                    delete=False,
                    encoding="utf-8",
                ) as tmp:
                    json.dump(data, tmp, indent=2, default=str)
                    tmp.flush()
                    os.fsync(tmp.fileno())
                    temp_path = tmp.name
                os.chmod(temp_path, 0o600)
                os.replace(temp_path, self.path)
                logging.info(f"💾 Saved {target.name}")
        except (OSError, ValueError) as e:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
            logging.error(f"💥 Atomic save failed: {type(e).__name__} path={self.path}")
            raise
        finally:
            try:
                os.unlink(lock_path)
            except OSError:
                pass
