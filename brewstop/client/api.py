from __future__ import annotations

import logging
from typing import Any

import httpx

from ..cafes.models import AmenityTag, Cafe, CafeCreate, RatingSummary, Review, ReviewCreate
from .config import DEFAULT_CLIENT_CONFIG, ClientConfig
from .errors import AuthenticationRequired, DirectoryError, ValidationFailed

logger = logging.getLogger(__name__)

# Query-string names the API uses for each amenity flag
_FLAG_PARAMS: dict[AmenityTag, str] = {
    AmenityTag.bike_racks: "hasBikeRacks",
    AmenityTag.water_refill: "hasWaterRefill",
    AmenityTag.outdoor_seating: "hasOutdoorSeating",
}


class CafeDirectoryClient:
    """Async client for the café directory HTTP API."""

    def __init__(
        self,
        config: ClientConfig = DEFAULT_CLIENT_CONFIG,
        *,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(base_url=config.base_url, timeout=config.timeout)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> CafeDirectoryClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self.http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise DirectoryError(f"Could not reach the café directory: {exc}") from exc

        if resp.is_success:
            return resp.json()

        try:
            body = resp.json()
        except ValueError:
            body = {}
        message = body.get("message") if isinstance(body, dict) else None
        message = message or f"Request failed with status {resp.status_code}"

        if resp.status_code == 400:
            details = body.get("details") if isinstance(body, dict) else None
            raise ValidationFailed(message, details)
        if resp.status_code == 401:
            raise AuthenticationRequired(message)
        raise DirectoryError(message, status_code=resp.status_code)

    # ── Auth ─────────────────────────────────────────────────────────────

    async def login(self, username: str, password: str) -> dict[str, Any]:
        body = await self._request("POST", "/auth/login", json={"username": username, "password": password})
        return body["user"]

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")

    # ── Cafés & reviews ──────────────────────────────────────────────────

    async def list_cafes(
        self,
        search: str | None = None,
        flags: dict[AmenityTag, bool] | None = None,
    ) -> list[Cafe]:
        params: dict[str, str] = {}
        if search:
            params["search"] = search
        for tag, wanted in (flags or {}).items():
            params[_FLAG_PARAMS[AmenityTag(tag)]] = "true" if wanted else "false"
        data = await self._request("GET", "/cafes", params=params)
        return [Cafe.model_validate(item) for item in data]

    async def get_cafe(self, cafe_id: str) -> Cafe | None:
        try:
            data = await self._request("GET", f"/cafes/{cafe_id}")
        except DirectoryError as exc:
            if exc.status_code == 404:
                return None
            raise
        return Cafe.model_validate(data)

    async def list_reviews(self, cafe_id: str) -> list[Review]:
        data = await self._request("GET", f"/cafes/{cafe_id}/reviews")
        return [Review.model_validate(item) for item in data]

    async def get_rating(self, cafe_id: str) -> RatingSummary | None:
        try:
            data = await self._request("GET", f"/cafes/{cafe_id}/rating")
        except DirectoryError as exc:
            if exc.status_code == 404:
                return None
            raise
        return RatingSummary.model_validate(data)

    async def create_cafe(self, cafe: CafeCreate) -> Cafe:
        data = await self._request("POST", "/cafes", json=cafe.model_dump(mode="json", by_alias=True))
        return Cafe.model_validate(data)

    async def create_review(self, review: ReviewCreate) -> Review:
        data = await self._request("POST", "/reviews", json=review.model_dump(mode="json", by_alias=True))
        return Review.model_validate(data)
