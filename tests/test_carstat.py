"""
Unit tests for the carstat API client.
"""

import httpx
import pytest

from conftest import API_KEY, make_car, make_listing
from errors import UpstreamError, VehicleNotFoundError
from services.carstat import CarstatClient, build_list_params


class TestBuildListParams:
    def test_defaults(self):
        assert build_list_params({}) == {
            "minutes": "10",
            "per_page": "50",
            "prices_history": "1",
            "page": "1",
            "country": "US",
        }

    def test_overrides_and_optionals(self):
        params = build_list_params(
            {"per_page": "20", "country": "CA", "manufacturer_id": "16", "vehicle_type": None}
        )

        assert params["per_page"] == "20"
        assert params["country"] == "CA"
        assert params["manufacturer_id"] == "16"
        assert "vehicle_type" not in params

    def test_empty_values_fall_back(self):
        params = build_list_params({"page": "", "manufacturer_id": ""})

        assert params["page"] == "1"
        assert "manufacturer_id" not in params


class TestCarstatClient:
    @pytest.mark.asyncio
    async def test_list_cars_forwards_params_and_key(self, carstat, upstream):
        listing = make_listing([make_car()])
        upstream.reply("/api/cars", listing)

        result = await carstat.list_cars({"vehicle_type": "1"})

        assert result == listing
        request = upstream.calls_to("/api/cars")[0]
        assert request.headers["x-api-key"] == API_KEY
        assert request.headers["accept"] == "*/*"
        assert request.url.params["vehicle_type"] == "1"
        assert request.url.params["per_page"] == "50"

    @pytest.mark.asyncio
    async def test_list_cars_upstream_error(self, carstat, upstream):
        upstream.reply("/api/cars", {"message": "boom"}, status_code=503)

        with pytest.raises(UpstreamError) as exc_info:
            await carstat.list_cars({})

        assert str(exc_info.value) == "Failed to fetch car data"
        assert exc_info.value.upstream_status == 503
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_list_cars_transport_error(self, upstream_config):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = CarstatClient(upstream_config, transport=httpx.MockTransport(refuse))

        with pytest.raises(UpstreamError) as exc_info:
            await client.list_cars({})

        assert exc_info.value.upstream_status is None

    @pytest.mark.asyncio
    async def test_list_cars_non_json_body(self, carstat, upstream):
        upstream.reply("/api/cars", "<html>oops</html>")

        with pytest.raises(UpstreamError):
            await carstat.list_cars({})

    @pytest.mark.asyncio
    async def test_get_lot_returns_data_member(self, carstat, upstream):
        car = make_car()
        upstream.reply("/api/search-lot/123/copart_com", {"data": car})

        result = await carstat.get_lot("123", "copart_com")

        assert result == car
        request = upstream.calls_to("/api/search-lot/123/copart_com")[0]
        assert request.url.params["prices_history"] == "1"
        assert request.headers["x-api-key"] == API_KEY

    @pytest.mark.asyncio
    async def test_get_lot_not_found(self, carstat, upstream):
        upstream.reply("/api/search-lot/999/copart_com", {"message": "Not found"}, status_code=404)

        with pytest.raises(VehicleNotFoundError) as exc_info:
            await carstat.get_lot("999", "copart_com")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_get_lot_without_data_is_not_found(self, carstat, upstream):
        upstream.reply("/api/search-lot/123/copart_com", {"data": None})

        with pytest.raises(VehicleNotFoundError):
            await carstat.get_lot("123", "copart_com")

    @pytest.mark.asyncio
    async def test_get_lot_server_error(self, carstat, upstream):
        upstream.reply("/api/search-lot/123/copart_com", {"message": "boom"}, status_code=500)

        with pytest.raises(UpstreamError) as exc_info:
            await carstat.get_lot("123", "copart_com")

        assert str(exc_info.value) == "Failed to fetch vehicle details"
