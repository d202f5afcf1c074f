"""
Location validation for the order wizard.

Geocodes the shooting address with Mapbox, asks the provider matching
service for photographers nearby and prices the travel to the nearest one.
Digital services are offered everywhere, so an address with no photographer
in range is still valid, just without on-site photography.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple
from urllib.parse import quote

import httpx

from .. import config
from ..domain.orders.draft import Address
from ..domain.orders.pricing import calculate_travel_cost

logger = logging.getLogger(__name__)

INCOMPLETE_ADDRESS_MESSAGE = "Please enter a complete address."
MISSING_HOUSE_NUMBER_MESSAGE = "Please enter an address with a house number."
GEOCODING_NOT_CONFIGURED_MESSAGE = "Geocoding is not configured."
ADDRESS_NOT_FOUND_MESSAGE = "The address could not be found. Please check your input."
VALIDATION_FAILED_MESSAGE = "The address could not be validated. Please try again or contact us."
PHOTOGRAPHY_UNAVAILABLE_MESSAGE = (
    "On-site photography is not yet available in your region. Our digital services are available."
)
PHOTOGRAPHY_AVAILABLE_MESSAGE = "On-site photography is available in your region."


class LocationServiceError(Exception):
    """Raised when an upstream location service answers with an error"""


@dataclass
class ProviderMatch:
    id: str
    distance_km: float
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass
class ProviderAvailability:
    available: bool
    providers: List[ProviderMatch] = field(default_factory=list)
    nearest_distance_km: Optional[float] = None


@dataclass
class LocationCheckResult:
    valid: bool
    message: str
    travel_cost: Decimal = Decimal("0")
    distance_km: float = 0.0
    photography_available: bool = False
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class MapboxGeocoder:
    def __init__(self, access_token: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.access_token = access_token if access_token is not None else config.MAPBOX_ACCESS_TOKEN
        self.client = client

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)

    async def geocode(self, address: Address) -> Optional[Tuple[float, float]]:
        """Forward-geocode an address. Returns (longitude, latitude) or None."""
        query = f"{address.street} {address.house_number}, {address.postal_code} {address.city}"
        url = f"{config.MAPBOX_GEOCODING_URL}/{quote(query)}.json"
        params = {
            "access_token": self.access_token,
            "country": config.GEOCODING_COUNTRY,
            "types": "address",
            "limit": "1",
        }

        resp = await _get(self.client, url, params=params)
        if resp.status_code >= 400:
            logger.warning(f"Mapbox geocoding error {resp.status_code}: {resp.text[:200]}")
            raise LocationServiceError("Geocoding service temporarily unavailable")

        features = resp.json().get("features") or []
        if not features:
            return None
        longitude, latitude = features[0]["center"]
        return longitude, latitude


class ProviderMatchingClient:
    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url if base_url is not None else config.PROVIDER_MATCHING_URL
        self.client = client

    async def find_eligible_providers(
        self, latitude: float, longitude: float, max_distance_km: Optional[int] = None
    ) -> ProviderAvailability:
        """Photographers within range of a location, nearest first"""
        if not self.base_url:
            raise LocationServiceError("Provider matching service is not configured")

        payload = {
            "latitude": latitude,
            "longitude": longitude,
            "max_distance_km": max_distance_km or config.MAX_PROVIDER_DISTANCE_KM,
        }
        headers = {}
        if config.PROVIDER_MATCHING_API_KEY:
            headers["Authorization"] = f"Bearer {config.PROVIDER_MATCHING_API_KEY}"

        resp = await _post(self.client, self.base_url, json=payload, headers=headers)
        if resp.status_code >= 400:
            logger.warning(f"Provider matching error {resp.status_code}: {resp.text[:200]}")
            raise LocationServiceError("Failed to find available photographers")

        providers = [
            ProviderMatch(
                id=str(p["id"]),
                distance_km=float(p["distance_km"]),
                name=p.get("name"),
                email=p.get("email"),
            )
            for p in resp.json().get("photographers") or []
        ]
        providers.sort(key=lambda p: p.distance_km)
        return ProviderAvailability(
            available=bool(providers),
            providers=providers,
            nearest_distance_km=providers[0].distance_km if providers else None,
        )


async def _get(client: Optional[httpx.AsyncClient], url: str, **kwargs) -> httpx.Response:
    if client is not None:
        return await client.get(url, timeout=config.HTTP_TIMEOUT_SECONDS, **kwargs)
    async with httpx.AsyncClient() as c:
        return await c.get(url, timeout=config.HTTP_TIMEOUT_SECONDS, **kwargs)


async def _post(client: Optional[httpx.AsyncClient], url: str, **kwargs) -> httpx.Response:
    if client is not None:
        return await client.post(url, timeout=config.HTTP_TIMEOUT_SECONDS, **kwargs)
    async with httpx.AsyncClient() as c:
        return await c.post(url, timeout=config.HTTP_TIMEOUT_SECONDS, **kwargs)


class LocationValidator:
    """Checks whether an address can be served and what travel to it costs"""

    def __init__(
        self,
        geocoder: Optional[MapboxGeocoder] = None,
        matching: Optional[ProviderMatchingClient] = None,
    ):
        self.geocoder = geocoder or MapboxGeocoder()
        self.matching = matching or ProviderMatchingClient()

    async def validate(self, address: Address) -> LocationCheckResult:
        if not address.street or not address.postal_code or not address.city:
            return LocationCheckResult(valid=False, message=INCOMPLETE_ADDRESS_MESSAGE)
        if not address.house_number:
            return LocationCheckResult(valid=False, message=MISSING_HOUSE_NUMBER_MESSAGE)
        if not self.geocoder.is_configured:
            logger.error("❌ MAPBOX_ACCESS_TOKEN not configured")
            return LocationCheckResult(valid=False, message=GEOCODING_NOT_CONFIGURED_MESSAGE)

        try:
            coordinates = await self.geocoder.geocode(address)
            if coordinates is None:
                return LocationCheckResult(valid=False, message=ADDRESS_NOT_FOUND_MESSAGE)

            longitude, latitude = coordinates
            availability = await self.matching.find_eligible_providers(latitude, longitude)
        except (httpx.HTTPError, LocationServiceError, KeyError, ValueError) as e:
            logger.error(f"❌ Location validation failed for {address.postal_code} {address.city}: {e}")
            return LocationCheckResult(valid=False, message=VALIDATION_FAILED_MESSAGE)

        if not availability.available:
            logger.info(f"📍 No photographer in range of {address.postal_code} {address.city}")
            return LocationCheckResult(
                valid=True,
                message=PHOTOGRAPHY_UNAVAILABLE_MESSAGE,
                photography_available=False,
                latitude=latitude,
                longitude=longitude,
            )

        distance_km = availability.providers[0].distance_km
        return LocationCheckResult(
            valid=True,
            message=PHOTOGRAPHY_AVAILABLE_MESSAGE,
            travel_cost=calculate_travel_cost(distance_km),
            distance_km=distance_km,
            photography_available=True,
            latitude=latitude,
            longitude=longitude,
        )
