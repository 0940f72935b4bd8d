from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from ..config import Settings
from ..errors import NotFoundError, ProviderUnavailableError, ValidationError
from ..schemas import AddressComponent, DistanceEstimate, GeocodeResult
from ..telemetry import instrument_stage
from .criteria_service import validate_coordinates
from .distance_service import haversine_km, straight_line_minutes
from .enrichment_service import format_duration

logger = logging.getLogger(__name__)

GOOGLE_MAPS_BASE_URL = "https://maps.googleapis.com/maps/api"
GEOCODE_ENDPOINT = "/geocode/json"
DISTANCE_MATRIX_ENDPOINT = "/distancematrix/json"
TRAVEL_MODES = ("driving", "walking", "bicycling", "transit")
DEFAULT_TRAVEL_MODE = "driving"
_NO_MATCH_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}

Coordinates = tuple[float, float]


@dataclass(frozen=True)
class GeocodeConfig:
    api_key: str | None = None
    region: str = "in"
    timeout_seconds: float = 10.0
    routing_enabled: bool = True
    base_url: str = GOOGLE_MAPS_BASE_URL

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeocodeConfig":
        return cls(
            api_key=settings.google_maps_api_key or None,
            region=settings.geocode_region,
            timeout_seconds=settings.provider_timeout_seconds,
            routing_enabled=settings.routing_enabled,
        )


class GeocodingProvider(Protocol):
    def geocode(self, address: str) -> GeocodeResult: ...

    def reverse_geocode(self, lat: float, lng: float) -> GeocodeResult: ...

    def route(self, origin: Coordinates, destination: Coordinates, mode: str) -> DistanceEstimate: ...


class DistanceStrategy(Protocol):
    def estimate(self, origin: Coordinates, destination: Coordinates, mode: str) -> DistanceEstimate: ...


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _address_components(raw: Any) -> list[AddressComponent]:
    if not isinstance(raw, list):
        return []
    components: list[AddressComponent] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        long_name = item.get("long_name")
        if not isinstance(long_name, str):
            continue
        short_name = item.get("short_name")
        types = item.get("types") if isinstance(item.get("types"), list) else []
        components.append(
            AddressComponent(
                long_name=long_name,
                short_name=short_name if isinstance(short_name, str) else long_name,
                types=[value for value in types if isinstance(value, str)],
            )
        )
    return components


class GoogleMapsProvider:
    """Google Geocoding and Distance Matrix APIs over httpx.

    Every call carries the configured timeout and is attempted exactly once.
    """

    def __init__(
        self,
        api_key: str,
        *,
        region: str = "in",
        timeout_seconds: float = 10.0,
        base_url: str = GOOGLE_MAPS_BASE_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.region = region
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url
        self.transport = transport

    def _request_json(self, endpoint: str, params: dict[str, str]) -> dict[str, Any]:
        query = {**params, "key": self.api_key, "region": self.region}
        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout_seconds, transport=self.transport) as client:
                response = client.get(endpoint, params=query)
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as exc:
            raise ProviderUnavailableError(f"Maps provider timed out after {self.timeout_seconds}s") from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(f"Maps provider request failed: {type(exc).__name__}") from exc
        except ValueError as exc:
            raise ProviderUnavailableError("Maps provider returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise ProviderUnavailableError("Unexpected maps provider response payload")
        return payload

    @staticmethod
    def _check_status(payload: dict[str, Any], not_found_message: str) -> None:
        status = payload.get("status")
        if status == "OK":
            return
        if status in _NO_MATCH_STATUSES:
            raise NotFoundError(not_found_message)
        logger.warning("maps provider error: status=%s error_message=%s", status, payload.get("error_message"))
        raise ProviderUnavailableError(f"Maps provider returned status {status}")

    def _first_geocode_result(self, payload: dict[str, Any], not_found_message: str) -> dict[str, Any]:
        self._check_status(payload, not_found_message)
        results = payload.get("results")
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            raise NotFoundError(not_found_message)
        return results[0]

    def geocode(self, address: str) -> GeocodeResult:
        payload = self._request_json(GEOCODE_ENDPOINT, {"address": address})
        result = self._first_geocode_result(payload, "Address not found")
        try:
            location = result["geometry"]["location"]
            lat = float(location["lat"])
            lng = float(location["lng"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderUnavailableError("Maps provider result has no coordinates") from exc
        return GeocodeResult(
            latitude=lat,
            longitude=lng,
            formatted_address=str(result.get("formatted_address") or address),
            place_id=result.get("place_id"),
            address_components=_address_components(result.get("address_components")),
        )

    def reverse_geocode(self, lat: float, lng: float) -> GeocodeResult:
        payload = self._request_json(GEOCODE_ENDPOINT, {"latlng": f"{lat},{lng}"})
        result = self._first_geocode_result(payload, "Location not found")
        return GeocodeResult(
            latitude=lat,
            longitude=lng,
            formatted_address=str(result.get("formatted_address") or ""),
            place_id=result.get("place_id"),
            address_components=_address_components(result.get("address_components")),
        )

    def route(self, origin: Coordinates, destination: Coordinates, mode: str) -> DistanceEstimate:
        payload = self._request_json(
            DISTANCE_MATRIX_ENDPOINT,
            {
                "origins": f"{origin[0]},{origin[1]}",
                "destinations": f"{destination[0]},{destination[1]}",
                "mode": mode,
            },
        )
        self._check_status(payload, "Route not found")
        try:
            element = payload["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderUnavailableError("Unable to calculate route") from exc

        element_status = element.get("status") if isinstance(element, dict) else None
        if element_status in _NO_MATCH_STATUSES:
            raise NotFoundError("Route not found")
        if element_status != "OK":
            raise ProviderUnavailableError(f"Maps provider route status {element_status}")

        try:
            distance_m = float(element["distance"]["value"])
            duration_s = float(element["duration"]["value"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderUnavailableError("Maps provider route has no distance") from exc

        return DistanceEstimate(
            distance_km=distance_m / 1000.0,
            duration_minutes=_round_half_up(duration_s / 60.0),
            route_type="routed",
            mode=mode,
            distance_text=element["distance"].get("text"),
            duration_text=element["duration"].get("text"),
        )


class UnconfiguredProvider:
    """Stand-in used when no API key is configured; every lookup is unavailable."""

    def _unavailable(self) -> ProviderUnavailableError:
        return ProviderUnavailableError("Maps provider API key not configured")

    def geocode(self, address: str) -> GeocodeResult:
        raise self._unavailable()

    def reverse_geocode(self, lat: float, lng: float) -> GeocodeResult:
        raise self._unavailable()

    def route(self, origin: Coordinates, destination: Coordinates, mode: str) -> DistanceEstimate:
        raise self._unavailable()


class StraightLineDistance:
    def estimate(self, origin: Coordinates, destination: Coordinates, mode: str) -> DistanceEstimate:
        distance_km = haversine_km(origin[0], origin[1], destination[0], destination[1])
        minutes = straight_line_minutes(distance_km)
        return DistanceEstimate(
            distance_km=distance_km,
            duration_minutes=minutes,
            route_type="straight_line",
            mode=mode,
            distance_text=f"{distance_km:.1f} km",
            duration_text=format_duration(minutes),
        )


class RoutedDistance:
    def __init__(self, provider: GeocodingProvider, fallback: DistanceStrategy | None = None) -> None:
        self.provider = provider
        self.fallback = fallback or StraightLineDistance()

    def estimate(self, origin: Coordinates, destination: Coordinates, mode: str) -> DistanceEstimate:
        try:
            return self.provider.route(origin, destination, mode)
        except ProviderUnavailableError as exc:
            logger.warning("Routing provider unavailable, using straight-line distance: %s", exc)
            return self.fallback.estimate(origin, destination, mode)


class GeocodeClient:
    def __init__(self, provider: GeocodingProvider, distance_strategy: DistanceStrategy | None = None) -> None:
        self.provider = provider
        self.distance_strategy = distance_strategy or StraightLineDistance()

    @instrument_stage("provider")
    def geocode(self, address: str) -> GeocodeResult:
        cleaned = (address or "").strip()
        if not cleaned:
            raise ValidationError("address", "must not be empty")
        return self.provider.geocode(cleaned)

    @instrument_stage("provider")
    def reverse_geocode(self, lat: float, lng: float) -> GeocodeResult:
        validate_coordinates(lat, lng)
        return self.provider.reverse_geocode(lat, lng)

    @instrument_stage("provider")
    def distance_between(
        self,
        origin: Coordinates,
        destination: Coordinates,
        mode: str | None = None,
    ) -> DistanceEstimate:
        validate_coordinates(origin[0], origin[1], lat_field="from_lat", lon_field="from_lon")
        validate_coordinates(destination[0], destination[1], lat_field="to_lat", lon_field="to_lon")
        resolved_mode = (mode or DEFAULT_TRAVEL_MODE).strip().lower()
        if resolved_mode not in TRAVEL_MODES:
            raise ValidationError("mode", f"must be one of {', '.join(TRAVEL_MODES)}")
        return self.distance_strategy.estimate(origin, destination, resolved_mode)


def build_geocode_client(config: GeocodeConfig, *, transport: httpx.BaseTransport | None = None) -> GeocodeClient:
    if not config.api_key:
        logger.info("No maps API key configured; geocoding disabled, distances are straight-line")
        return GeocodeClient(UnconfiguredProvider(), StraightLineDistance())

    provider = GoogleMapsProvider(
        config.api_key,
        region=config.region,
        timeout_seconds=config.timeout_seconds,
        base_url=config.base_url,
        transport=transport,
    )
    strategy: DistanceStrategy = RoutedDistance(provider) if config.routing_enabled else StraightLineDistance()
    return GeocodeClient(provider, strategy)
