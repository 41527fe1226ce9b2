from __future__ import annotations

import math

import numpy as np

# Kilometre radius; labels read "mi" for compatibility.
EARTH_RADIUS = 6371.0
EARTH_RADIUS_MILES = 3958.8

UNKNOWN_DISTANCE_LABEL = "— mi"


def haversine_distance(lat1, lon1, lat2, lon2, radius: float = EARTH_RADIUS):
    """
    Great-circle distance between two points given in degrees.

    Accepts scalars or numpy arrays (broadcast against each other). Scalar
    input returns a plain ``float``. NaN coordinates yield NaN rather than
    raising.
    """
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    d_phi = np.radians(np.abs(np.subtract(lat2, lat1)))
    d_lambda = np.radians(np.abs(np.subtract(lon2, lon1)))

    a = np.sin(d_phi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2) ** 2
    a = np.clip(a, 0.0, 1.0)
    distance = 2 * radius * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    if np.ndim(distance) == 0:
        return float(distance)
    return distance


def format_distance(distance: float | None) -> str:
    """Render a distance for display, e.g. ``"1.2 mi"`` or ``"<0.1 mi"``."""
    if distance is None or not math.isfinite(distance):
        return UNKNOWN_DISTANCE_LABEL
    if distance < 0.1:
        return "<0.1 mi"
    return f"{distance:.1f} mi"
