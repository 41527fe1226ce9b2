from __future__ import annotations

import logging
import math
from typing import NamedTuple, Protocol

from ..config import DEFAULT_APP_CONFIG, AppConfig

logger = logging.getLogger(__name__)


class Coordinate(NamedTuple):
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and -90.0 <= self.latitude <= 90.0
            and -180.0 <= self.longitude <= 180.0
        )


class LocationProvider(Protocol):
    def current(self) -> Coordinate | None:
        """Return the client's location, or ``None`` if unavailable or denied."""
        ...


class FixedLocation:
    """Always reports the same coordinate."""

    def __init__(self, latitude: float, longitude: float) -> None:
        self._coordinate = Coordinate(latitude, longitude)

    def current(self) -> Coordinate | None:
        return self._coordinate


class RequestLocation:
    """Location supplied by the client itself (query params, device geolocation)."""

    def __init__(self, latitude: float | None = None, longitude: float | None = None) -> None:
        self.latitude = latitude
        self.longitude = longitude

    def current(self) -> Coordinate | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(self.latitude, self.longitude)


def default_location(config: AppConfig = DEFAULT_APP_CONFIG) -> Coordinate:
    return Coordinate(config.default_latitude, config.default_longitude)


def resolve_reference(
    provider: LocationProvider | None,
    fallback: Coordinate | None = None,
) -> Coordinate:
    """Return the provider's location, falling back when it has none to give."""
    fallback = fallback or default_location()
    if provider is None:
        return fallback
    coordinate = provider.current()
    if coordinate is None:
        return fallback
    if not coordinate.is_valid():
        logger.warning("Ignoring invalid reference location %s, using fallback", coordinate)
        return fallback
    return coordinate
