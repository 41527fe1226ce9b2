from __future__ import annotations

from typing import Iterable

from .models import RatingSummary, Review

DIMENSIONS = (
    "rating_coffee",
    "rating_food",
    "rating_value",
    "rating_bike_friendly",
    "rating_group_friendly",
    "rating_overall",
)


def _mean(values: list[int]) -> float:
    return sum(values) / len(values) if values else 0.0


def average_rating(reviews: Iterable[Review]) -> float:
    """Mean overall rating, or 0.0 when no review carries one."""
    return _mean([r.rating_overall for r in reviews if r.rating_overall is not None])


def summarize_ratings(reviews: Iterable[Review]) -> RatingSummary:
    reviews = list(reviews)
    averages = {
        dim: round(_mean([getattr(r, dim) for r in reviews if getattr(r, dim) is not None]), 2)
        for dim in DIMENSIONS
    }
    return RatingSummary(**averages, rating_count=len(reviews))
