from __future__ import annotations

import asyncio

import httpx
import pytest

from brewstop.app import app
from brewstop.cafes.models import AmenityTag, Cafe, CafeCreate, ReviewCreate
from brewstop.cafes.store import reset_store
from brewstop.client.api import CafeDirectoryClient
from brewstop.client.errors import AuthenticationRequired, DirectoryError, ValidationFailed
from brewstop.client.view import DirectoryView, QueryGeneration
from brewstop.directory.location import FixedLocation, RequestLocation
from brewstop.favorites import FavoritesStore, MemoryStorage

NYC = (40.7128, -74.0060)


def _api_client(http: httpx.AsyncClient) -> CafeDirectoryClient:
    return CafeDirectoryClient(http=http)


def _asgi_http() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


def _cafe(cafe_id: str, name: str) -> Cafe:
    return Cafe(id=cafe_id, name=name, address="1 Test St", latitude=40.72, longitude=-74.0)


class _GatedSource:
    """Responds to each search only once its gate is released."""

    def __init__(self, responses: dict[str, object]) -> None:
        self.responses = responses
        self.gates = {search: asyncio.Event() for search in responses}

    async def list_cafes(self, search: str | None = None) -> list[Cafe]:
        await self.gates[search].wait()
        result = self.responses[search]
        if isinstance(result, Exception):
            raise result
        return result


# ── Generation tokens ────────────────────────────────────────────────────


def test_query_generation():
    gen = QueryGeneration()
    first = gen.next()
    assert gen.is_current(first)
    second = gen.next()
    assert not gen.is_current(first)
    assert gen.is_current(second)


@pytest.mark.parametrize("release_order", [("new", "old"), ("old", "new")])
def test_superseded_refresh_is_discarded(release_order):
    old, new = [_cafe("o", "Old")], [_cafe("n", "New")]

    async def scenario():
        source = _GatedSource({"old": old, "new": new})
        view = DirectoryView(source, FavoritesStore(MemoryStorage()), FixedLocation(*NYC))
        tasks = {
            "old": asyncio.create_task(view.refresh("old")),
            "new": asyncio.create_task(view.refresh("new")),
        }
        await asyncio.sleep(0)  # both requests now in flight
        applied = {}
        for search in release_order:
            source.gates[search].set()
            applied[search] = await tasks[search]
        return view, applied

    view, applied = asyncio.run(scenario())
    assert applied == {"old": False, "new": True}
    assert view.cafes == new


def test_failure_of_superseded_refresh_is_ignored():
    async def scenario():
        source = _GatedSource({"old": DirectoryError("offline"), "new": [_cafe("n", "New")]})
        view = DirectoryView(source, FavoritesStore(MemoryStorage()))
        old_task = asyncio.create_task(view.refresh("old"))
        new_task = asyncio.create_task(view.refresh("new"))
        await asyncio.sleep(0)
        source.gates["new"].set()
        await new_task
        source.gates["old"].set()
        return await old_task, view

    applied, view = asyncio.run(scenario())
    assert applied is False
    assert [c.id for c in view.cafes] == ["n"]


def test_failure_of_current_refresh_propagates():
    async def scenario():
        source = _GatedSource({"only": DirectoryError("offline")})
        view = DirectoryView(source, FavoritesStore(MemoryStorage()))
        source.gates["only"].set()
        await view.refresh("only")

    with pytest.raises(DirectoryError):
        asyncio.run(scenario())


# ── View over the real API ───────────────────────────────────────────────


def test_view_runs_pipeline_over_fetched_cafes():
    reset_store()

    async def scenario():
        async with _asgi_http() as http:
            favorites = FavoritesStore(MemoryStorage())
            view = DirectoryView(_api_client(http), favorites, RequestLocation())
            assert await view.refresh() is True
            view.set_query("café")
            assert view.toggle_amenity("waterRefill") is True
            names = [r.cafe.name for r in view.results()]

            view.toggle_favorite("oakwood-cafe")
            favorite_names = [r.cafe.name for r in view.favorites()]

            assert view.toggle_amenity(AmenityTag.water_refill) is False
            unfiltered = len(view.results())
            return names, favorite_names, unfiltered

    names, favorite_names, unfiltered = asyncio.run(scenario())
    assert names == ["Green Bean Café", "Oakwood Café"]
    assert favorite_names == ["Oakwood Café"]
    assert unfiltered == 3  # Riverbank and The Cycling Stop lack "café" in name and address


# ── API client ───────────────────────────────────────────────────────────


def test_client_reads_cafes_reviews_and_ratings():
    reset_store()

    async def scenario():
        async with _asgi_http() as http:
            client = _api_client(http)
            searched = await client.list_cafes(search="oakwood")
            flagged = await client.list_cafes(flags={AmenityTag.outdoor_seating: False})
            latte = await client.get_cafe("cafe-latte")
            missing = await client.get_cafe("nope")
            reviews = await client.list_reviews("cafe-latte")
            rating = await client.get_rating("cafe-latte")
            no_rating = await client.get_rating("nope")
            return searched, flagged, latte, missing, reviews, rating, no_rating

    searched, flagged, latte, missing, reviews, rating, no_rating = asyncio.run(scenario())
    assert [c.name for c in searched] == ["Oakwood Café"]
    assert [c.name for c in flagged] == ["Green Bean Café"]
    assert latte.has_bike_racks is True
    assert missing is None
    assert len(reviews) == 2
    assert rating.rating_overall == 4.5
    assert no_rating is None


def test_client_submissions_and_errors():
    reset_store()
    new_cafe = CafeCreate(name="Spoke & Bean", address="9 Gear St", latitude=51.5, longitude=-0.1)

    async def scenario():
        async with _asgi_http() as http:
            client = _api_client(http)

            with pytest.raises(AuthenticationRequired):
                await client.create_cafe(new_cafe)

            user = await client.login("rider", "rider123")
            created = await client.create_cafe(new_cafe)

            bad = new_cafe.model_copy(update={"latitude": 500.0})
            with pytest.raises(ValidationFailed) as excinfo:
                await client.create_cafe(bad)

            review = await client.create_review(ReviewCreate(
                cafe_id=created.id, user_name="Robin Rider", rating_overall=4, comment="Nice pump.",
            ))
            refreshed = await client.get_cafe(created.id)
            await client.logout()
            return user, created, excinfo.value, review, refreshed

    user, created, failure, review, refreshed = asyncio.run(scenario())
    assert user["username"] == "rider"
    assert created.user_id == "user-rider"
    assert "latitude" in failure.field_errors()
    assert review.user_id == "user-rider"
    assert refreshed.rating_count == 1


def test_client_network_failure():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://x") as http:
            await _api_client(http).list_cafes()

    with pytest.raises(DirectoryError) as excinfo:
        asyncio.run(scenario())
    assert excinfo.value.status_code is None


def test_client_generic_error_status():
    def broken(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"message": "Down for maintenance"})

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(broken), base_url="http://x") as http:
            await _api_client(http).list_cafes()

    with pytest.raises(DirectoryError) as excinfo:
        asyncio.run(scenario())
    assert excinfo.value.status_code == 503
    assert excinfo.value.message == "Down for maintenance"
