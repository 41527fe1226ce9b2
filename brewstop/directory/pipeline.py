from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from ..cafes.models import AMENITY_FIELDS, AmenityTag, Cafe, CafeWithDistance
from .distance import format_distance, haversine_distance
from .location import Coordinate


@dataclass(frozen=True)
class RankedCafe:
    cafe: Cafe
    distance: float

    @property
    def label(self) -> str:
        return format_distance(self.distance)

    def to_out(self) -> CafeWithDistance:
        finite = bool(np.isfinite(self.distance))
        # Fields were validated when the café was built
        return CafeWithDistance.model_construct(
            **dict(self.cafe),
            distance=round(self.distance, 3) if finite else None,
            distance_label=self.label,
        )


def matches_search(cafe: Cafe, query: str) -> bool:
    """Case-insensitive substring match against name or address. The query is not trimmed."""
    needle = query.lower()
    return needle in cafe.name.lower() or needle in cafe.address.lower()


def matches_amenities(cafe: Cafe, tags: Iterable[AmenityTag]) -> bool:
    """True when every selected tag's flag is set. No tags matches everything."""
    return all(getattr(cafe, AMENITY_FIELDS[AmenityTag(tag)]) for tag in tags)


def rank_by_distance(cafes: Sequence[Cafe], reference: Coordinate) -> list[RankedCafe]:
    """
    Annotate cafés with their distance from ``reference``, nearest first.

    Ties keep collection order. Cafés whose distance is not finite sort last,
    also in collection order.
    """
    if not cafes:
        return []

    lats = np.array([c.latitude for c in cafes], dtype=float)
    lons = np.array([c.longitude for c in cafes], dtype=float)
    distances = haversine_distance(reference.latitude, reference.longitude, lats, lons)

    # argsort places NaN at the end; map inf there too
    keys = np.where(np.isfinite(distances), distances, np.nan)
    order = np.argsort(keys, kind="stable")
    return [RankedCafe(cafe=cafes[i], distance=float(distances[i])) for i in order]


def filter_and_sort(
    cafes: Iterable[Cafe],
    query: str,
    tags: Iterable[AmenityTag],
    reference: Coordinate,
) -> list[RankedCafe]:
    """Apply the text and amenity predicates, then rank by distance."""
    tags = list(tags)
    survivors = [c for c in cafes if matches_search(c, query) and matches_amenities(c, tags)]
    return rank_by_distance(survivors, reference)


def favorite_cafes(
    cafes: Iterable[Cafe],
    favorite_ids: Iterable[str],
    reference: Coordinate,
) -> list[RankedCafe]:
    wanted = set(favorite_ids)
    return rank_by_distance([c for c in cafes if c.id in wanted], reference)
