from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone

from ..config import DEFAULT_APP_CONFIG
from .models import AMENITY_FIELDS, AmenityTag, Cafe, CafeCreate, Review, ReviewCreate
from .ratings import summarize_ratings

logger = logging.getLogger(__name__)


class CafeNotFound(LookupError):
    def __init__(self, cafe_id: str) -> None:
        super().__init__(f"Café not found: {cafe_id}")
        self.cafe_id = cafe_id


class CafeStore:
    """In-process café and review storage. Records are append-only."""

    def __init__(self) -> None:
        self._cafes: dict[str, Cafe] = {}
        self._reviews: list[Review] = []
        # Guards writes; a review and its aggregate refresh land together
        self._lock = threading.RLock()

    # ── Cafés ────────────────────────────────────────────────────────────

    def all_cafes(self) -> list[Cafe]:
        return list(self._cafes.values())

    def get_cafe(self, cafe_id: str) -> Cafe | None:
        return self._cafes.get(cafe_id)

    def search_cafes(self, query: str) -> list[Cafe]:
        """Case-insensitive substring match on name, address or description."""
        needle = query.lower()
        return [
            c for c in self._cafes.values()
            if needle in c.name.lower()
            or needle in c.address.lower()
            or needle in (c.description or "").lower()
        ]

    def filter_cafes(self, flags: dict[AmenityTag, bool]) -> list[Cafe]:
        """Exact match on every supplied flag; unsupplied flags don't constrain."""
        return [
            c for c in self._cafes.values()
            if all(getattr(c, AMENITY_FIELDS[tag]) == wanted for tag, wanted in flags.items())
        ]

    def create_cafe(
        self,
        data: CafeCreate,
        user_id: str | None = None,
        cafe_id: str | None = None,
    ) -> Cafe:
        cafe = Cafe(
            **data.model_dump(),
            id=cafe_id or str(uuid.uuid4()),
            user_id=user_id,
        )
        with self._lock:
            self._cafes[cafe.id] = cafe
        logger.info("Created café %s (%s)", cafe.id, cafe.name)
        return cafe

    # ── Reviews ──────────────────────────────────────────────────────────

    def reviews_for(self, cafe_id: str) -> list[Review]:
        return [r for r in self._reviews if r.cafe_id == cafe_id]

    def create_review(
        self,
        data: ReviewCreate,
        user_id: str | None = None,
        review_id: str | None = None,
    ) -> Review:
        review = Review(**data.model_dump(), id=review_id or str(uuid.uuid4()), user_id=user_id)
        with self._lock:
            cafe = self._cafes.get(data.cafe_id)
            if cafe is None:
                raise CafeNotFound(data.cafe_id)
            self._reviews.append(review)

            # Refresh the café's aggregate rating fields
            summary = summarize_ratings(self.reviews_for(cafe.id))
            self._cafes[cafe.id] = cafe.model_copy(
                update={**summary.model_dump(), "last_updated": datetime.now(timezone.utc)},
            )
        return review


_store: CafeStore | None = None
_store_lock = threading.Lock()


def get_store() -> CafeStore:
    """Return the process-wide store, seeding it on first call."""
    global _store
    with _store_lock:
        if _store is None:
            from .seed import load_seed

            store = CafeStore()
            load_seed(store, DEFAULT_APP_CONFIG.seed_dir)
            _store = store
        return _store


def reset_store() -> None:
    """Drop all state; the next ``get_store()`` reseeds."""
    global _store
    with _store_lock:
        _store = None
