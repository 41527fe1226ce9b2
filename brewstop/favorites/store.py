from __future__ import annotations

import json
import logging

from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

FAVORITES_KEY = "brewstop-favorites"


class FavoritesStore:
    """
    The set of café ids a client has favorited.

    Persisted as a JSON string array under a single key of ``storage``.
    Every call re-reads storage, so changes written by another holder of the
    same storage are picked up on the next call.
    """

    def __init__(self, storage: KeyValueStorage, key: str = FAVORITES_KEY) -> None:
        self.storage = storage
        self.key = key

    def ids(self) -> list[str]:
        """Favorited ids in the order they were added."""
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable favorites under %r", self.key, exc_info=True)
            return []
        if not isinstance(parsed, list):
            logger.warning("Discarding favorites under %r: expected a list", self.key)
            return []
        return [str(item) for item in parsed]

    def _write(self, ids: list[str]) -> None:
        self.storage.set(self.key, json.dumps(ids))

    def list(self) -> set[str]:
        return set(self.ids())

    def contains(self, cafe_id: str) -> bool:
        return cafe_id in self.ids()

    def add(self, cafe_id: str) -> None:
        ids = self.ids()
        if cafe_id not in ids:
            ids.append(cafe_id)
            self._write(ids)

    def remove(self, cafe_id: str) -> None:
        self._write([i for i in self.ids() if i != cafe_id])

    def toggle(self, cafe_id: str) -> bool:
        """Flip membership of ``cafe_id``; returns the new state."""
        if self.contains(cafe_id):
            self.remove(cafe_id)
            return False
        self.add(cafe_id)
        return True
