from __future__ import annotations

import logging
from typing import Protocol

from ..cafes.models import AmenityTag, Cafe
from ..directory.location import Coordinate, LocationProvider, resolve_reference
from ..directory.pipeline import RankedCafe, favorite_cafes, filter_and_sort
from ..favorites import FavoritesStore
from .errors import DirectoryError

logger = logging.getLogger(__name__)


class CafeSource(Protocol):
    async def list_cafes(self, search: str | None = None) -> list[Cafe]: ...


class QueryGeneration:
    """
    Monotonic request counter.

    Each request takes a token from ``next()``; its response may be applied
    only while ``is_current(token)`` holds, i.e. no newer request has started.
    """

    def __init__(self) -> None:
        self.latest = 0

    def next(self) -> int:
        self.latest += 1
        return self.latest

    def is_current(self, token: int) -> bool:
        return token == self.latest


class DirectoryView:
    """
    State behind the home, map and favorites screens.

    Holds the fetched café collection and the user's current query and amenity
    selection. ``results()`` and ``favorites()`` re-run the pipeline on demand.
    """

    def __init__(
        self,
        source: CafeSource,
        favorites: FavoritesStore,
        location: LocationProvider | None = None,
        fallback: Coordinate | None = None,
    ) -> None:
        self.source = source
        self.favorites_store = favorites
        self.location = location
        self.fallback = fallback
        self.cafes: list[Cafe] = []
        self.query = ""
        self.tags: list[AmenityTag] = []
        self._generation = QueryGeneration()

    async def refresh(self, search: str | None = None) -> bool:
        """
        Fetch the collection from the source.

        Returns False when a newer refresh started while this one was in
        flight; its response (or error) is then dropped.
        """
        token = self._generation.next()
        try:
            cafes = await self.source.list_cafes(search=search)
        except DirectoryError:
            if not self._generation.is_current(token):
                logger.debug("Ignoring failure of superseded refresh %d", token)
                return False
            raise

        if not self._generation.is_current(token):
            logger.debug(
                "Discarding superseded refresh %d (latest is %d)", token, self._generation.latest,
            )
            return False
        self.cafes = cafes
        return True

    @property
    def reference(self) -> Coordinate:
        return resolve_reference(self.location, self.fallback)

    def set_query(self, query: str) -> None:
        self.query = query

    def toggle_amenity(self, tag: AmenityTag | str) -> bool:
        """Select or deselect ``tag``; returns whether it is now selected."""
        tag = AmenityTag(tag)
        if tag in self.tags:
            self.tags.remove(tag)
            return False
        self.tags.append(tag)
        return True

    def results(self) -> list[RankedCafe]:
        return filter_and_sort(self.cafes, self.query, self.tags, self.reference)

    def favorites(self) -> list[RankedCafe]:
        return favorite_cafes(self.cafes, self.favorites_store.ids(), self.reference)

    def toggle_favorite(self, cafe_id: str) -> bool:
        return self.favorites_store.toggle(cafe_id)
