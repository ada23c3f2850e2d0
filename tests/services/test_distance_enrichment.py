"""Unit tests for the walking distance enrichment client."""

from unittest.mock import MagicMock

import pytest
import requests

from teafinder.errors import EnrichmentUnavailableError, ServiceError
from teafinder.models.distance import ElementFailed, WalkingLeg
from teafinder.models.shop import GeoPoint
from teafinder.services.distance_enrichment import DistanceEnrichmentClient
from teafinder.services.google_maps import GoogleMapsClient

ORIGIN = GeoPoint(latitude=9.9312, longitude=76.2673)


def ok_element(meters, seconds):
    return {
        "status": "OK",
        "distance": {"text": f"{meters} m", "value": meters},
        "duration": {"text": f"{seconds} s", "value": seconds},
    }


def matrix_response(elements, status="OK"):
    return {"status": status, "rows": [{"elements": elements}]}


def destinations(count):
    return [GeoPoint(latitude=9.9 + i * 0.001, longitude=76.26) for i in range(count)]


@pytest.fixture
def maps_client():
    return MagicMock(spec=GoogleMapsClient)


def test_enrich_returns_legs_in_order(maps_client):
    maps_client.distance_matrix.return_value = matrix_response(
        [ok_element(500, 360), {"status": "ZERO_RESULTS"}, ok_element(3500, 2400)]
    )
    client = DistanceEnrichmentClient(maps_client)

    results = client.enrich(ORIGIN, destinations(3))

    assert results == [
        WalkingLeg(distance_meters=500, travel_time_seconds=360),
        ElementFailed(status="ZERO_RESULTS"),
        WalkingLeg(distance_meters=3500, travel_time_seconds=2400),
    ]
    maps_client.distance_matrix.assert_called_once_with(ORIGIN, destinations(3), mode="walking")


def test_enrich_chunks_large_batches(maps_client):
    maps_client.distance_matrix.side_effect = lambda origin, points, mode: matrix_response(
        [ok_element(100 * (i + 1), 60) for i in range(len(points))]
    )
    client = DistanceEnrichmentClient(maps_client)

    results = client.enrich(ORIGIN, destinations(30))

    assert len(results) == 30
    assert maps_client.distance_matrix.call_count == 2
    assert len(maps_client.distance_matrix.call_args_list[0].args[1]) == 25
    assert len(maps_client.distance_matrix.call_args_list[1].args[1]) == 5
    assert results[25].distance_meters == 100


def test_enrich_missing_elements_are_failures(maps_client):
    maps_client.distance_matrix.return_value = matrix_response([ok_element(500, 360)])
    client = DistanceEnrichmentClient(maps_client)

    results = client.enrich(ORIGIN, destinations(2))

    assert isinstance(results[0], WalkingLeg)
    assert results[1] == ElementFailed(status="MISSING")


def test_enrich_malformed_element_is_failure(maps_client):
    maps_client.distance_matrix.return_value = matrix_response([{"status": "OK"}])
    client = DistanceEnrichmentClient(maps_client)

    assert client.enrich(ORIGIN, destinations(1)) == [ElementFailed(status="MISSING")]


def test_enrich_network_failure(maps_client):
    maps_client.distance_matrix.side_effect = requests.Timeout("timed out")
    client = DistanceEnrichmentClient(maps_client)

    with pytest.raises(EnrichmentUnavailableError):
        client.enrich(ORIGIN, destinations(2))


def test_enrich_request_denied(maps_client):
    maps_client.distance_matrix.return_value = {
        "status": "REQUEST_DENIED",
        "error_message": "The provided API key is invalid.",
        "rows": [],
    }
    client = DistanceEnrichmentClient(maps_client)

    with pytest.raises(ServiceError) as exc_info:
        client.enrich(ORIGIN, destinations(1))
    assert "REQUEST_DENIED" in str(exc_info.value)


def test_enrich_no_destinations(maps_client):
    client = DistanceEnrichmentClient(maps_client)
    assert client.enrich(ORIGIN, []) == []
    maps_client.distance_matrix.assert_not_called()


def test_invalid_chunk_size(maps_client):
    with pytest.raises(ValueError):
        DistanceEnrichmentClient(maps_client, max_destinations_per_call=0)
