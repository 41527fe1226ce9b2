from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import get_current_user, require_user, review_author, sign_in, sign_out
from .auth.users import authenticate
from .cafes.models import (
    AMENITY_LABELS,
    AmenityOut,
    AmenityTag,
    Cafe,
    CafeCreate,
    CafeWithDistance,
    FavoritesOut,
    FavoriteStatus,
    LoginRequest,
    RatingSummary,
    Review,
    ReviewCreate,
)
from .cafes.ratings import summarize_ratings
from .cafes.store import CafeNotFound, CafeStore, get_store
from .config import DEFAULT_APP_CONFIG
from .directory.location import Coordinate, RequestLocation, default_location, resolve_reference
from .directory.pipeline import favorite_cafes, filter_and_sort
from .favorites import FavoritesStore, SessionStorage

logger = logging.getLogger(__name__)

app = FastAPI(title="BrewStop Café Directory API", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_APP_CONFIG.session_secret)


# ── Error shape ──────────────────────────────────────────────────────────


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # The rejected input is not echoed back; it may be NaN or Infinity
    details = [{k: v for k, v in err.items() if k != "input"} for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "details": jsonable_encoder(details)},
    )


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# ── Per-request collaborators ────────────────────────────────────────────


def get_favorites(request: Request) -> FavoritesStore:
    """The calling client's favorites, kept in its session cookie."""
    return FavoritesStore(SessionStorage(request.session), key=DEFAULT_APP_CONFIG.favorites_key)


def get_reference(
    lat: float | None = Query(default=None, ge=-90.0, le=90.0),
    lon: float | None = Query(default=None, ge=-180.0, le=180.0),
) -> Coordinate:
    return resolve_reference(RequestLocation(lat, lon), default_location(DEFAULT_APP_CONFIG))


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/amenities", response_model=list[AmenityOut])
def amenities() -> list[AmenityOut]:
    return [AmenityOut(id=tag, label=label) for tag, label in AMENITY_LABELS.items()]


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    sign_in(request, user)
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    # Favorites belong to the client, not the account; keep them.
    sign_out(request)
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Cafés & reviews ──────────────────────────────────────────────────────


@app.get("/cafes", response_model=list[Cafe])
def list_cafes(
    search: str | None = None,
    has_bike_racks: bool | None = Query(default=None, alias="hasBikeRacks"),
    has_water_refill: bool | None = Query(default=None, alias="hasWaterRefill"),
    has_outdoor_seating: bool | None = Query(default=None, alias="hasOutdoorSeating"),
    store: CafeStore = Depends(get_store),
) -> list[Cafe]:
    flags = {
        tag: wanted
        for tag, wanted in (
            (AmenityTag.bike_racks, has_bike_racks),
            (AmenityTag.water_refill, has_water_refill),
            (AmenityTag.outdoor_seating, has_outdoor_seating),
        )
        if wanted is not None
    }
    cafes = store.search_cafes(search) if search else store.all_cafes()
    if flags:
        matching = {c.id for c in store.filter_cafes(flags)}
        cafes = [c for c in cafes if c.id in matching]
    return cafes


@app.get("/cafes/{cafe_id}", response_model=Cafe)
def get_cafe(cafe_id: str, store: CafeStore = Depends(get_store)) -> Cafe:
    cafe = store.get_cafe(cafe_id)
    if cafe is None:
        raise HTTPException(status_code=404, detail="Café not found")
    return cafe


@app.get("/cafes/{cafe_id}/reviews", response_model=list[Review])
def list_reviews(cafe_id: str, store: CafeStore = Depends(get_store)) -> list[Review]:
    return store.reviews_for(cafe_id)


@app.get("/cafes/{cafe_id}/rating", response_model=RatingSummary)
def cafe_rating(cafe_id: str, store: CafeStore = Depends(get_store)) -> RatingSummary:
    if store.get_cafe(cafe_id) is None:
        raise HTTPException(status_code=404, detail="Café not found")
    return summarize_ratings(store.reviews_for(cafe_id))


@app.post("/cafes", response_model=Cafe, status_code=201)
def create_cafe(
    body: CafeCreate,
    user: dict = Depends(require_user),
    store: CafeStore = Depends(get_store),
) -> Cafe:
    return store.create_cafe(body, user_id=user["id"])


@app.post("/reviews", response_model=Review, status_code=201)
def create_review(
    body: ReviewCreate,
    user: dict | None = Depends(get_current_user),
    store: CafeStore = Depends(get_store),
) -> Review:
    body = body.model_copy(update={"user_name": review_author(body.user_name, user)})
    try:
        return store.create_review(body, user_id=user["id"] if user else None)
    except CafeNotFound:
        raise HTTPException(status_code=404, detail="Café not found")


# ── Directory query pipeline ─────────────────────────────────────────────


@app.get("/directory", response_model=list[CafeWithDistance])
def directory(
    q: str = "",
    amenity: list[AmenityTag] = Query(default=[]),
    reference: Coordinate = Depends(get_reference),
    store: CafeStore = Depends(get_store),
) -> list[CafeWithDistance]:
    ranked = filter_and_sort(store.all_cafes(), q, amenity, reference)
    return [r.to_out() for r in ranked]


# ── Favorites ────────────────────────────────────────────────────────────


@app.get("/favorites", response_model=FavoritesOut)
def list_favorites(favorites: FavoritesStore = Depends(get_favorites)) -> FavoritesOut:
    return FavoritesOut(ids=favorites.ids())


@app.get("/favorites/cafes", response_model=list[CafeWithDistance])
def list_favorite_cafes(
    favorites: FavoritesStore = Depends(get_favorites),
    reference: Coordinate = Depends(get_reference),
    store: CafeStore = Depends(get_store),
) -> list[CafeWithDistance]:
    ranked = favorite_cafes(store.all_cafes(), favorites.ids(), reference)
    return [r.to_out() for r in ranked]


@app.put("/favorites/{cafe_id}", response_model=FavoriteStatus)
def add_favorite(cafe_id: str, favorites: FavoritesStore = Depends(get_favorites)) -> FavoriteStatus:
    favorites.add(cafe_id)
    return FavoriteStatus(id=cafe_id, favorite=True)


@app.delete("/favorites/{cafe_id}", response_model=FavoriteStatus)
def remove_favorite(cafe_id: str, favorites: FavoritesStore = Depends(get_favorites)) -> FavoriteStatus:
    favorites.remove(cafe_id)
    return FavoriteStatus(id=cafe_id, favorite=False)


@app.post("/favorites/{cafe_id}/toggle", response_model=FavoriteStatus)
def toggle_favorite(cafe_id: str, favorites: FavoritesStore = Depends(get_favorites)) -> FavoriteStatus:
    return FavoriteStatus(id=cafe_id, favorite=favorites.toggle(cafe_id))
