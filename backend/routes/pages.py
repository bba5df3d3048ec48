"""Browser-facing pages — vehicle listings and lot detail views.

Both pages read through the caller's session cache before going upstream, so
paging back and forth or reopening a vehicle within the TTL costs no API calls.
"""

import logging
from pathlib import Path
from typing import Callable
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from errors import CatalogError
from services import presenters
from services.cache import ExpiringKeyValueCache
from services.carstat import CarstatClient, carstat_client_factory
from services.sessions import session_cache

logger = logging.getLogger(__name__)

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

# Choices offered by the listing filter form
PER_PAGE_CHOICES = ("10", "20", "50")
MANUFACTURERS = {
    "16": "BMW",
    "14": "Mercedes-Benz",
    "15": "Audi",
    "1": "Toyota",
    "2": "Honda",
    "3": "Ford",
}

LISTING_FILTERS = ("per_page", "minutes", "prices_history", "country", "vehicle_type", "manufacturer_id", "page")

EMPTY_LISTING = {"data": [], "meta": {"current_page": 1, "last_page": 1, "per_page": 20, "total": 0}}

PLACEHOLDER_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="300" height="200" viewBox="0 0 300 200">'
    '<rect width="300" height="200" fill="#e5e7eb"/>'
    '<text x="150" y="105" font-family="sans-serif" font-size="14" fill="#6b7280" '
    'text-anchor="middle">No image</text></svg>'
)


def _page_url(filters: dict, page: int) -> str:
    query = {k: v for k, v in filters.items() if v}
    query["page"] = str(page)
    return f"/cars?{urlencode(query)}"


def _clear_url(filters: dict) -> str:
    query = {k: v for k, v in filters.items() if v}
    return f"/cars/cache/clear?{urlencode(query)}" if query else "/cars/cache/clear"


@router.get("/")
async def index() -> RedirectResponse:
    return RedirectResponse("/cars")


@router.get("/placeholder.svg")
async def placeholder() -> Response:
    return Response(PLACEHOLDER_SVG, media_type="image/svg+xml")


@router.get("/cars")
async def cars_page(
    request: Request,
    per_page: str = Query("20"),
    minutes: str = Query("10"),
    prices_history: str = Query("1"),
    country: str = Query("US"),
    vehicle_type: str | None = Query("1"),
    manufacturer_id: str | None = Query(None),
    page: str | None = Query(None),
    refresh: bool = Query(False),
    cache: ExpiringKeyValueCache = Depends(session_cache),
    make_client: Callable[[], CarstatClient] = Depends(carstat_client_factory),
):
    """Paginated listing. ``refresh=1`` skips the cached copy."""
    filters = {
        "per_page": per_page,
        "minutes": minutes,
        "prices_history": prices_history,
        "country": country,
        "vehicle_type": vehicle_type or None,
        "manufacturer_id": manufacturer_id or None,
        "page": page or None,
    }

    listing = None if refresh else cache.get_cars_list(filters)
    from_cache = listing is not None
    error = None
    status_code = 200

    if listing is None:
        try:
            listing = await make_client().list_cars(filters)
        except CatalogError as e:
            error, status_code = str(e), e.status_code
        else:
            cache.set_cars_list(filters, listing)

    listing = listing if isinstance(listing, dict) else EMPTY_LISTING
    meta = {**EMPTY_LISTING["meta"], **(listing.get("meta") or {})}
    cards = [c for c in (presenters.car_card(car) for car in listing.get("data") or []) if c]

    current = int(meta["current_page"] or 1)
    last = int(meta["last_page"] or current)
    return templates.TemplateResponse(
        request,
        "cars.html",
        {
            "error": error,
            "cards": cards,
            "meta": meta,
            "filters": filters,
            "from_cache": from_cache,
            "per_page_choices": PER_PAGE_CHOICES,
            "manufacturers": MANUFACTURERS,
            "show_pagination": int(meta["total"] or 0) > int(meta["per_page"] or per_page),
            "prev_url": _page_url(filters, current - 1) if current > 1 else None,
            "next_url": _page_url(filters, current + 1) if current < last else None,
            "refresh_url": _page_url(filters, current) + "&refresh=1",
            "clear_url": _clear_url(filters),
        },
        status_code=status_code,
    )


@router.post("/cars/cache/clear")
async def clear_cache(
    request: Request,
    cache: ExpiringKeyValueCache = Depends(session_cache),
) -> RedirectResponse:
    """Empty the session cache, then reload the listing with the same filters."""
    cache.clear()
    logger.info("Session cache cleared")
    kept = {k: v for k, v in request.query_params.items() if k in LISTING_FILTERS and v}
    kept["refresh"] = "1"
    return RedirectResponse(f"/cars?{urlencode(kept)}", status_code=303)


@router.get("/cars/lot/{lot}/{domain}")
async def car_detail_page(
    request: Request,
    lot: str,
    domain: str,
    cache: ExpiringKeyValueCache = Depends(session_cache),
    make_client: Callable[[], CarstatClient] = Depends(carstat_client_factory),
):
    car = cache.get_car_details(lot, domain)
    error = None
    status_code = 200

    if car is None:
        try:
            car = await make_client().get_lot(lot, domain)
        except CatalogError as e:
            error, status_code = str(e), e.status_code
        else:
            cache.set_car_details(lot, domain, car)

    detail = presenters.car_detail(car) if car else None
    return templates.TemplateResponse(
        request,
        "car_detail.html",
        {"error": error, "detail": detail, "lot": lot, "domain": domain},
        status_code=status_code,
    )
