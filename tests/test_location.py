"""Tests for location validation against mocked Mapbox and provider matching"""

import asyncio
from decimal import Decimal

import httpx

from spaceseller.domain.orders.draft import Address
from spaceseller.services.location import (
    ADDRESS_NOT_FOUND_MESSAGE,
    INCOMPLETE_ADDRESS_MESSAGE,
    MISSING_HOUSE_NUMBER_MESSAGE,
    VALIDATION_FAILED_MESSAGE,
    LocationValidator,
    MapboxGeocoder,
    ProviderMatchingClient,
)

ADDRESS = Address(street="Hauptstraße", house_number="12", postal_code="10115", city="Berlin")


def _validator(handler, token="test-token"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LocationValidator(
        geocoder=MapboxGeocoder(access_token=token, client=client),
        matching=ProviderMatchingClient(base_url="https://matching.test/find", client=client),
    )


def _handler(features, photographers, matching_status=200):
    def handle(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.mapbox.com":
            assert request.url.params["access_token"] == "test-token"
            return httpx.Response(200, json={"features": features})
        return httpx.Response(matching_status, json={"photographers": photographers})

    return handle


BERLIN = [{"center": [13.38, 52.53]}]


class TestIncompleteAddress:
    def test_missing_city(self):
        result = asyncio.run(_validator(_handler(BERLIN, [])).validate(Address(street="A", postal_code="1")))
        assert not result.valid
        assert result.message == INCOMPLETE_ADDRESS_MESSAGE

    def test_missing_house_number(self):
        address = Address(street="Hauptstraße", postal_code="10115", city="Berlin")
        result = asyncio.run(_validator(_handler(BERLIN, [])).validate(address))
        assert result.message == MISSING_HOUSE_NUMBER_MESSAGE

    def test_missing_token(self):
        result = asyncio.run(_validator(_handler(BERLIN, []), token="").validate(ADDRESS))
        assert not result.valid


class TestAvailability:
    def test_nearest_photographer_prices_travel(self):
        photographers = [
            {"id": "far", "distance_km": 80},
            {"id": "near", "distance_km": 50},
        ]
        result = asyncio.run(_validator(_handler(BERLIN, photographers)).validate(ADDRESS))
        assert result.valid
        assert result.photography_available
        assert result.distance_km == 50
        assert result.travel_cost == Decimal("20")
        assert result.latitude == 52.53

    def test_no_photographer_still_valid(self):
        result = asyncio.run(_validator(_handler(BERLIN, [])).validate(ADDRESS))
        assert result.valid
        assert not result.photography_available
        assert result.travel_cost == Decimal("0")

    def test_address_not_found(self):
        result = asyncio.run(_validator(_handler([], [])).validate(ADDRESS))
        assert not result.valid
        assert result.message == ADDRESS_NOT_FOUND_MESSAGE

    def test_upstream_error(self):
        result = asyncio.run(_validator(_handler(BERLIN, [], matching_status=500)).validate(ADDRESS))
        assert not result.valid
        assert result.message == VALIDATION_FAILED_MESSAGE
