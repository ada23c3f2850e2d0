"""Google Maps web service client for teafinder backend."""

import json
import logging
from typing import Dict, List, Optional, Sequence

import requests

from ..models.shop import GeoPoint

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


def format_point(point: GeoPoint) -> str:
    return f"{point.latitude},{point.longitude}"


class GoogleMapsClient:

    def __init__(self, api_key: str, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = "https://maps.googleapis.com/maps/api"

        # Fields used when building the shop photo list and the frontend place lookup
        self.place_details_fields = [
            "place_id",
            "name",
            "geometry",
            "formatted_address",
            "rating",
            "photos",
        ]

    def _log_error_response(self, url: str, params: Dict, response: requests.Response):
        safe_params = {key: value for key, value in params.items() if key != "key"}
        logger.error(f"Error response from Google Maps API: Status {response.status_code}")
        logger.error(f"URL: {url} params: {json.dumps(safe_params)}")
        try:
            logger.error(f"Error details: {json.dumps(response.json())}")
        except ValueError:
            logger.error(f"Raw response: {response.text}")

    def _request(self, path: str, params: Dict) -> Dict:
        """Make a GET request to a Google Maps JSON endpoint.

        Args:
            path: Endpoint path below the Maps API base URL
            params: Query parameters, without the API key

        Returns:
            JSON response from the API

        Raises:
            requests.RequestException: On network failure, timeout or HTTP error status
        """
        url = f"{self.base_url}/{path}"
        query = {**params, "key": self.api_key}
        response = requests.get(url, params=query, timeout=self.timeout)

        if response.status_code != 200:
            self._log_error_response(url, params, response)

        response.raise_for_status()
        return response.json()

    def _request_binary(self, path: str, params: Dict) -> requests.Response:
        """Make a GET request and return the raw response (used for images)."""
        url = f"{self.base_url}/{path}"
        query = {**params, "key": self.api_key}
        response = requests.get(url, params=query, timeout=self.timeout)

        if response.status_code != 200:
            self._log_error_response(url, params, response)

        response.raise_for_status()
        return response

    def distance_matrix(
        self, origin: GeoPoint, destinations: Sequence[GeoPoint], mode: str = "walking"
    ) -> Dict:
        """Distances and travel times from one origin to many destinations.

        Args:
            origin: Start point
            destinations: End points, in the order the response rows should follow
            mode: Travel mode; teafinder always searches on foot

        Returns:
            dict: Response from the Distance Matrix API
        """
        params = {
            "origins": format_point(origin),
            "destinations": "|".join(format_point(d) for d in destinations),
            "mode": mode,
            "units": "metric",
        }
        return self._request("distancematrix/json", params)

    def geocode(self, address: str) -> Dict:
        """Resolve a free-text address to coordinates."""
        return self._request("geocode/json", {"address": address})

    def place_autocomplete(self, text: str, country: str = "in") -> Dict:
        """Place predictions for partially typed input, restricted to one country."""
        return self._request(
            "place/autocomplete/json", {"input": text, "components": f"country:{country}"}
        )

    def place_details(self, place_id: str, fields: Optional[List[str]] = None) -> Dict:
        """Get details for a place."""
        params = {"place_id": place_id, "fields": ",".join(fields or self.place_details_fields)}
        return self._request("place/details/json", params)

    def place_photo_references(self, place_id: str, limit: int = 6) -> List[str]:
        """Current photo references for a place, best first."""
        data = self.place_details(place_id, fields=["photos"])
        photos = (data.get("result") or {}).get("photos") or []
        return [photo["photo_reference"] for photo in photos[:limit] if "photo_reference" in photo]

    def place_photo(self, photo_reference: str, max_width: int = 400) -> requests.Response:
        """Fetch a place photo; the response carries the image bytes and content type."""
        return self._request_binary(
            "place/photo", {"photo_reference": photo_reference, "maxwidth": max_width}
        )
