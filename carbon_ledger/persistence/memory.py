from __future__ import annotations

from typing import Optional

from .base import PersistenceAdapter


class InMemoryPersistence(PersistenceAdapter):
    """Dict-backed storage for tests and embedding."""

    name = "memory"

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.blobs: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def save(self, key: str, payload: str) -> None:
        self.blobs[key] = payload
