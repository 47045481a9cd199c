"""File-backed persistence: one JSON document per key under a directory."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from .base import PersistenceAdapter

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFilePersistence(PersistenceAdapter):
    name = "json"

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid persistence key: {key!r}")
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def save(self, key: str, payload: str) -> None:
        """Write via a temporary file so a crash never leaves a half-written blob."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(payload)
        tmp_path.replace(path)
        logger.debug("Saved %s (%d bytes)", path, len(payload))
