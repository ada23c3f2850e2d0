"""Walking distance enrichment for search candidates."""

import logging
from typing import List, Sequence

import requests

from ..errors import EnrichmentUnavailableError
from ..models.distance import ElementFailed, EnrichmentResult, WalkingLeg
from ..models.shop import GeoPoint
from .google_maps import GoogleMapsClient

logger = logging.getLogger(__name__)

# Distance Matrix accepts at most 25 destinations per request
MAX_DESTINATIONS_PER_CALL = 25

MISSING_ELEMENT_STATUS = "MISSING"


class DistanceEnrichmentClient:
    """Looks up walking distance and time from an origin to a batch of points."""

    def __init__(
        self,
        maps_client: GoogleMapsClient,
        max_destinations_per_call: int = MAX_DESTINATIONS_PER_CALL,
    ):
        if max_destinations_per_call < 1:
            raise ValueError("max_destinations_per_call must be positive")
        self.maps_client = maps_client
        self.max_destinations_per_call = max_destinations_per_call

    def enrich(self, origin: GeoPoint, destinations: Sequence[GeoPoint]) -> List[EnrichmentResult]:
        """Walking legs for each destination, in the order given.

        Raises:
            EnrichmentUnavailableError: If any provider round trip fails as a whole
        """
        results: List[EnrichmentResult] = []
        size = self.max_destinations_per_call
        for start in range(0, len(destinations), size):
            chunk = destinations[start : start + size]
            results.extend(self._enrich_chunk(origin, chunk))
        return results

    def _enrich_chunk(
        self, origin: GeoPoint, destinations: Sequence[GeoPoint]
    ) -> List[EnrichmentResult]:
        try:
            data = self.maps_client.distance_matrix(origin, destinations, mode="walking")
        except (requests.RequestException, ValueError) as e:
            raise EnrichmentUnavailableError(f"Distance Matrix request failed: {str(e)}") from e

        status = data.get("status")
        if status != "OK":
            message = data.get("error_message", "")
            raise EnrichmentUnavailableError(f"Distance Matrix returned {status}: {message}")

        rows = data.get("rows") or []
        elements = (rows[0].get("elements") or []) if rows else []
        return [self._parse_element(elements, index) for index in range(len(destinations))]

    @staticmethod
    def _parse_element(elements: List[dict], index: int) -> EnrichmentResult:
        if index >= len(elements):
            return ElementFailed(status=MISSING_ELEMENT_STATUS)

        element = elements[index] or {}
        status = element.get("status", MISSING_ELEMENT_STATUS)
        if status != "OK":
            logger.warning(f"Distance Matrix element {index} failed with status {status}")
            return ElementFailed(status=status)

        try:
            return WalkingLeg(
                distance_meters=int(element["distance"]["value"]),
                travel_time_seconds=int(element["duration"]["value"]),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Distance Matrix element {index} is malformed: {element}")
            return ElementFailed(status=MISSING_ELEMENT_STATUS)
