import httpx
import pytest

from localmart.errors import NotFoundError, ProviderUnavailableError, ValidationError
from localmart.services.distance_service import haversine_km
from localmart.services.geocode_service import (
    GeocodeClient,
    GeocodeConfig,
    GoogleMapsProvider,
    RoutedDistance,
    StraightLineDistance,
    UnconfiguredProvider,
    build_geocode_client,
)

INDIRANAGAR = (12.9784, 77.6408)
WHITEFIELD = (12.9698, 77.7500)

GEOCODE_OK = {
    "status": "OK",
    "results": [
        {
            "formatted_address": "100 Feet Rd, Indiranagar, Bengaluru, Karnataka 560038, India",
            "place_id": "ChIJ-indiranagar",
            "geometry": {"location": {"lat": 12.9784, "lng": 77.6408}},
            "address_components": [
                {"long_name": "Indiranagar", "short_name": "Indiranagar", "types": ["sublocality"]},
                {"long_name": "Bengaluru", "short_name": "Bengaluru", "types": ["locality"]},
                {"short_name": "missing long name"},
            ],
        }
    ],
}

ROUTE_OK = {
    "status": "OK",
    "rows": [
        {
            "elements": [
                {
                    "status": "OK",
                    "distance": {"value": 14250, "text": "14.3 km"},
                    "duration": {"value": 2430, "text": "41 mins"},
                }
            ]
        }
    ],
}


class RecordingTransport(httpx.MockTransport):
    def __init__(self, responder) -> None:
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return responder(request)

        super().__init__(handler)


def _json(payload, status_code=200):
    return lambda request: httpx.Response(status_code, json=payload)


def _timeout(request):
    raise httpx.ReadTimeout("read timed out", request=request)


def _client(responder, *, routing_enabled=True) -> tuple[GeocodeClient, RecordingTransport]:
    transport = RecordingTransport(responder)
    config = GeocodeConfig(api_key="test-key", region="in", timeout_seconds=2.0, routing_enabled=routing_enabled)
    return build_geocode_client(config, transport=transport), transport


def test_geocode_returns_first_result():
    client, transport = _client(_json(GEOCODE_OK))

    result = client.geocode("  100 Feet Road, Indiranagar  ")

    assert result.latitude == pytest.approx(12.9784)
    assert result.longitude == pytest.approx(77.6408)
    assert result.place_id == "ChIJ-indiranagar"
    assert [component.long_name for component in result.address_components] == ["Indiranagar", "Bengaluru"]

    request = transport.requests[0]
    assert request.url.path.endswith("/geocode/json")
    assert request.url.params["address"] == "100 Feet Road, Indiranagar"
    assert request.url.params["key"] == "test-key"
    assert request.url.params["region"] == "in"


def test_reverse_geocode_echoes_coordinates():
    client, transport = _client(_json(GEOCODE_OK))

    result = client.reverse_geocode(12.97841, 77.64079)

    assert (result.latitude, result.longitude) == (12.97841, 77.64079)
    assert result.formatted_address.startswith("100 Feet Rd")
    assert transport.requests[0].url.params["latlng"] == "12.97841,77.64079"


@pytest.mark.parametrize("status", ["ZERO_RESULTS", "NOT_FOUND"])
def test_no_match_is_not_found(status):
    client, _ = _client(_json({"status": status, "results": []}))
    with pytest.raises(NotFoundError):
        client.geocode("nowhere in particular")


def test_ok_status_without_results_is_not_found():
    client, _ = _client(_json({"status": "OK", "results": []}))
    with pytest.raises(NotFoundError):
        client.geocode("somewhere")


@pytest.mark.parametrize(
    "responder",
    [
        _json({"status": "REQUEST_DENIED", "error_message": "bad key"}),
        _json({"status": "OVER_QUERY_LIMIT"}),
        _json({"error": "boom"}, status_code=500),
        _timeout,
        lambda request: httpx.Response(200, content=b"<html>not json</html>"),
    ],
    ids=["denied", "quota", "http-500", "timeout", "invalid-json"],
)
def test_provider_failures_are_unavailable(responder):
    client, _ = _client(responder)
    with pytest.raises(ProviderUnavailableError):
        client.geocode("Indiranagar")


def test_provider_is_called_once_without_retry():
    client, transport = _client(_timeout)
    with pytest.raises(ProviderUnavailableError):
        client.geocode("Indiranagar")
    assert len(transport.requests) == 1


def test_empty_address_is_rejected_before_any_request():
    client, transport = _client(_json(GEOCODE_OK))
    with pytest.raises(ValidationError) as exc_info:
        client.geocode("   ")
    assert exc_info.value.field == "address"
    assert transport.requests == []


def test_reverse_geocode_validates_coordinates():
    client, transport = _client(_json(GEOCODE_OK))
    with pytest.raises(ValidationError) as exc_info:
        client.reverse_geocode(91.0, 77.6)
    assert exc_info.value.field == "latitude"
    assert transport.requests == []


def test_routed_distance_uses_provider_values():
    client, transport = _client(_json(ROUTE_OK))

    estimate = client.distance_between(INDIRANAGAR, WHITEFIELD, "Walking")

    assert estimate.route_type == "routed"
    assert estimate.mode == "walking"
    assert estimate.distance_km == pytest.approx(14.25)
    assert estimate.duration_minutes == 41
    assert estimate.distance_text == "14.3 km"
    assert transport.requests[0].url.path.endswith("/distancematrix/json")
    assert transport.requests[0].url.params["mode"] == "walking"


@pytest.mark.parametrize(
    "responder",
    [
        _json({"error": "boom"}, status_code=500),
        _timeout,
        _json({"status": "OK", "rows": [{"elements": [{"status": "MAX_ROUTE_LENGTH_EXCEEDED"}]}]}),
    ],
    ids=["http-500", "timeout", "element-error"],
)
def test_routing_failure_falls_back_to_straight_line(responder):
    client, _ = _client(responder)

    estimate = client.distance_between(INDIRANAGAR, WHITEFIELD)

    expected_km = haversine_km(*INDIRANAGAR, *WHITEFIELD)
    assert estimate.route_type == "straight_line"
    assert estimate.mode == "driving"
    assert estimate.distance_km == pytest.approx(expected_km)
    assert estimate.duration_minutes == round(expected_km * 2)


def test_route_not_found_propagates():
    client, _ = _client(_json({"status": "OK", "rows": [{"elements": [{"status": "ZERO_RESULTS"}]}]}))
    with pytest.raises(NotFoundError):
        client.distance_between(INDIRANAGAR, (12.9, 80.5))


def test_routing_disabled_never_calls_provider():
    client, transport = _client(_json(ROUTE_OK), routing_enabled=False)

    estimate = client.distance_between(INDIRANAGAR, WHITEFIELD, "transit")

    assert estimate.route_type == "straight_line"
    assert estimate.mode == "transit"
    assert transport.requests == []


def test_distance_validation_names_the_field():
    client, _ = _client(_json(ROUTE_OK))

    with pytest.raises(ValidationError) as exc_info:
        client.distance_between(INDIRANAGAR, (12.9, 181.0))
    assert exc_info.value.field == "to_lon"

    with pytest.raises(ValidationError) as exc_info:
        client.distance_between(INDIRANAGAR, WHITEFIELD, "teleport")
    assert exc_info.value.field == "mode"


def test_straight_line_estimate_texts():
    estimate = StraightLineDistance().estimate((12.97, 77.59), (12.97, 77.59), "driving")
    assert estimate.distance_km == 0
    assert estimate.duration_minutes == 0
    assert estimate.distance_text == "0.0 km"
    assert estimate.duration_text == "0 mins"


def test_missing_api_key_disables_geocoding_but_not_distance():
    client = build_geocode_client(GeocodeConfig(api_key=None))

    assert isinstance(client.provider, UnconfiguredProvider)
    with pytest.raises(ProviderUnavailableError):
        client.geocode("Indiranagar")
    assert client.distance_between(INDIRANAGAR, WHITEFIELD).route_type == "straight_line"


def test_routed_distance_strategy_with_custom_fallback():
    class FixedFallback:
        def estimate(self, origin, destination, mode):
            return StraightLineDistance().estimate(origin, origin, mode)

    strategy = RoutedDistance(UnconfiguredProvider(), FixedFallback())
    estimate = strategy.estimate(INDIRANAGAR, WHITEFIELD, "driving")
    assert estimate.distance_km == 0


def test_provider_exposes_configured_timeout():
    provider = GoogleMapsProvider("key", timeout_seconds=3.5)
    assert provider.timeout_seconds == 3.5
