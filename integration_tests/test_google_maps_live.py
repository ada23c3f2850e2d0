import os

import pytest
from dotenv import load_dotenv

from teafinder.models.distance import WalkingLeg
from teafinder.models.shop import GeoPoint
from teafinder.services.distance_enrichment import DistanceEnrichmentClient
from teafinder.services.google_maps import GoogleMapsClient

# Load environment variables from .env file
load_dotenv()

# MG Road and Marine Drive, Kochi
ORIGIN = GeoPoint(latitude=9.9312, longitude=76.2673)
DESTINATION = GeoPoint(latitude=9.9252, longitude=76.2599)


@pytest.fixture
def google_maps_client():
    """Fixture to create a GoogleMapsClient instance"""
    api_key = os.environ.get("GOOGLE_MAPS_API_KEY")
    if not api_key:
        pytest.skip("GOOGLE_MAPS_API_KEY environment variable not found")
    return GoogleMapsClient(api_key)


def test_distance_matrix_walking(google_maps_client):
    """Walking distance between two Kochi points is longer than the straight line"""
    results = DistanceEnrichmentClient(google_maps_client).enrich(ORIGIN, [DESTINATION])

    assert len(results) == 1
    leg = results[0]
    assert isinstance(leg, WalkingLeg)
    assert leg.distance_meters > 1000
    assert leg.travel_time_seconds > 0
    print(f"\nWalk: {leg.distance_meters} m in {leg.travel_time_seconds} s")


def test_geocode(google_maps_client):
    data = google_maps_client.geocode("MG Road, Kochi, Kerala")

    assert data["status"] == "OK"
    location = data["results"][0]["geometry"]["location"]
    assert 9.8 < location["lat"] < 10.1
    assert 76.1 < location["lng"] < 76.4


def test_place_autocomplete(google_maps_client):
    data = google_maps_client.place_autocomplete("Kochi")

    assert data["status"] == "OK"
    assert len(data["predictions"]) > 0
    place_id = data["predictions"][0]["place_id"]
    print(f"\nFirst prediction: {data['predictions'][0]['description']} (ID: {place_id})")


def test_place_details_and_photos(google_maps_client):
    place_id = google_maps_client.place_autocomplete("Kochi")["predictions"][0]["place_id"]

    details = google_maps_client.place_details(place_id)
    assert details["status"] == "OK"
    assert "name" in details["result"]

    references = google_maps_client.place_photo_references(place_id, limit=1)
    if not references:
        pytest.skip("No photos available for this place")

    photo = google_maps_client.place_photo(references[0], max_width=200)
    assert photo.headers["Content-Type"].startswith("image/")
    assert len(photo.content) > 0
