"""
Seed the café store from the bundled CSV files.

Usage:
    python -m brewstop.cafes.seed
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd
from pydantic import ValidationError

from ..config import DEFAULT_APP_CONFIG
from .models import CafeCreate, ReviewCreate
from .store import CafeStore

logger = logging.getLogger(__name__)

CAFES_FILENAME = "cafes.csv"
REVIEWS_FILENAME = "reviews.csv"

# Columns holding "|"-separated lists
LIST_COLUMNS = ("menu_items", "menu_highlights", "gallery_images", "photos")

RATING_COLUMNS = (
    "rating_overall",
    "rating_coffee",
    "rating_food",
    "rating_value",
    "rating_bike_friendly",
    "rating_group_friendly",
)


def _normalize_rating(rating: Any) -> int | None:
    if rating is None:
        return None
    try:
        value = round(float(rating))
    except (TypeError, ValueError):
        return None
    # Clamp to [1, 5]
    return max(1, min(5, value))


def _split_list(value: Any) -> list[str]:
    if value is None:
        return []
    return [part.strip() for part in str(value).split("|") if part.strip()]


def _read_records(path: Path) -> list[dict[str, Any]]:
    df = pd.read_csv(path, dtype={"id": str})
    # NaN -> None, numpy scalars -> Python scalars
    df = df.astype(object).where(pd.notna(df), None)

    records = df.to_dict(orient="records")
    for record in records:
        for col in LIST_COLUMNS:
            if col in record:
                record[col] = _split_list(record[col])
        for col in RATING_COLUMNS:
            if col in record:
                record[col] = _normalize_rating(record[col])
    return records


def load_seed(store: CafeStore, seed_dir: Path = DEFAULT_APP_CONFIG.seed_dir) -> tuple[int, int]:
    """
    Load cafés, then reviews, into ``store``.

    Rows that fail validation are skipped and logged. Missing files are
    treated as empty. Returns ``(cafes_loaded, reviews_loaded)``.
    """
    cafes_path = seed_dir / CAFES_FILENAME
    reviews_path = seed_dir / REVIEWS_FILENAME

    cafe_count = 0
    if cafes_path.is_file():
        for row in _read_records(cafes_path):
            cafe_id = row.pop("id", None)
            try:
                store.create_cafe(CafeCreate(**row), cafe_id=cafe_id)
            except ValidationError:
                logger.warning("Skipping invalid seed café %r", cafe_id, exc_info=True)
                continue
            cafe_count += 1
    else:
        logger.warning("Seed file %s not found, starting with no cafés", cafes_path)

    review_count = 0
    if reviews_path.is_file():
        for row in _read_records(reviews_path):
            review_id = row.pop("id", None)
            try:
                store.create_review(ReviewCreate(**row), review_id=review_id)
            except (ValidationError, LookupError):
                logger.warning("Skipping invalid seed review %r", review_id, exc_info=True)
                continue
            review_count += 1

    logger.info("Seeded %d cafés and %d reviews from %s", cafe_count, review_count, seed_dir)
    return cafe_count, review_count


if __name__ == "__main__":
    cafes, reviews = load_seed(CafeStore())
    print(f"Seed data OK: {cafes} cafés, {reviews} reviews.")
