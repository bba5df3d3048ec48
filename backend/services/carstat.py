"""carstat.dev API client — vehicle auction listings and lot lookups.

Every request carries the ``x-api-key`` header from UpstreamConfig. Payloads
are passed through untouched; callers decide what to render or cache.
"""

import logging
from typing import Callable

import httpx

from config import UpstreamConfig, settings
from errors import UpstreamError, VehicleNotFoundError

logger = logging.getLogger(__name__)

# Defaults applied by the upstream proxy when the caller omits a parameter
LIST_DEFAULTS = {
    "minutes": "10",
    "per_page": "50",
    "prices_history": "1",
    "page": "1",
    "country": "US",
}
LIST_OPTIONAL = ("manufacturer_id", "vehicle_type")


def build_list_params(query: dict[str, str | None]) -> dict[str, str]:
    """Merge caller query params over LIST_DEFAULTS, dropping empty optionals."""
    params = {name: query.get(name) or default for name, default in LIST_DEFAULTS.items()}
    for name in LIST_OPTIONAL:
        if query.get(name):
            params[name] = query[name]
    return params


class CarstatClient:
    def __init__(self, config: UpstreamConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {"accept": "*/*", "x-api-key": self.config.api_key}

    async def _get(self, path: str, params: dict[str, str]) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        ) as client:
            return await client.get(path, params=params, headers=self._headers())

    async def list_cars(self, query: dict[str, str | None]) -> dict:
        """Fetch one page of listings from ``/cars``."""
        params = build_list_params(query)
        logger.info("Fetching cars: %s", params)
        try:
            resp = await self._get("/cars", params)
        except httpx.HTTPError as e:
            logger.error("carstat /cars request failed: %s", e)
            raise UpstreamError("Failed to fetch car data") from e

        if resp.is_error:
            logger.error("carstat /cars responded with status %d", resp.status_code)
            raise UpstreamError("Failed to fetch car data", upstream_status=resp.status_code)
        return _json(resp, "Failed to fetch car data")

    async def get_lot(self, lot: str, domain: str) -> dict:
        """Look up a single vehicle by auction lot number and domain."""
        path = f"/search-lot/{lot}/{domain}"
        try:
            resp = await self._get(path, {"prices_history": "1"})
        except httpx.HTTPError as e:
            logger.error("carstat lot search failed for %s/%s: %s", lot, domain, e)
            raise UpstreamError("Failed to fetch vehicle details") from e

        if resp.status_code == 404:
            raise VehicleNotFoundError(lot, domain)
        if resp.is_error:
            logger.error("Lot search API error %d: %s", resp.status_code, resp.text)
            raise UpstreamError("Failed to fetch vehicle details", upstream_status=resp.status_code)

        body = _json(resp, "Failed to fetch vehicle details")
        car = body.get("data") if isinstance(body, dict) else None
        if car is None:
            raise VehicleNotFoundError(lot, domain)
        return car

    async def ping(self) -> None:
        """Smallest possible listing request; raises UpstreamError on failure."""
        await self.list_cars({"per_page": "1"})


def _json(resp: httpx.Response, message: str):
    try:
        return resp.json()
    except ValueError as e:
        logger.error("carstat returned non-JSON body (status %d)", resp.status_code)
        raise UpstreamError(message, upstream_status=resp.status_code) from e


def get_carstat_client() -> CarstatClient:
    """FastAPI dependency. Raises ConfigurationError if credentials are missing."""
    return CarstatClient(settings.upstream())


def carstat_client_factory() -> Callable[[], CarstatClient]:
    """FastAPI dependency for pages: defers building the client to a cache miss,
    so a ConfigurationError surfaces inside the handler instead of during
    dependency resolution.
    """
    return get_carstat_client
