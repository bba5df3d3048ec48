"""Proxy routes — forward listing queries to carstat with the server's API key."""

import logging

from fastapi import APIRouter, Depends, Query

from services.carstat import CarstatClient, get_carstat_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/cars")
async def list_cars(
    minutes: str | None = Query(None),
    per_page: str | None = Query(None),
    prices_history: str | None = Query(None),
    page: str | None = Query(None),
    manufacturer_id: str | None = Query(None),
    vehicle_type: str | None = Query(None),
    country: str | None = Query(None),
    client: CarstatClient = Depends(get_carstat_client),
) -> dict:
    """Upstream ``/cars`` response, unchanged."""
    return await client.list_cars(
        {
            "minutes": minutes,
            "per_page": per_page,
            "prices_history": prices_history,
            "page": page,
            "manufacturer_id": manufacturer_id,
            "vehicle_type": vehicle_type,
            "country": country,
        }
    )


@router.get("/cars/lot/{lot}/{domain}")
async def car_by_lot(
    lot: str,
    domain: str,
    client: CarstatClient = Depends(get_carstat_client),
) -> dict:
    """The ``data`` member of the upstream lot search."""
    return await client.get_lot(lot, domain)
