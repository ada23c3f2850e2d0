"""Search and ranking pipeline for nearby tea shops."""

import logging
import math
from typing import List, Optional

from ..errors import InvalidRequestError
from ..models.distance import ElementFailed, WalkingLeg
from ..models.shop import Candidate, GeoPoint, RankedResult
from ..utils.geo import is_valid_coordinate
from .distance_enrichment import DistanceEnrichmentClient
from .geo_store import CANDIDATE_LIMIT, GeoStore

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_RADIUS_METERS = 5000

# Walking routes are never shorter than the straight line, so the radius query
# reaches 1.5x further than the requested walking distance.
SEARCH_RADIUS_FACTOR = 1.5


def search_radius_meters(max_distance_km: Optional[float]) -> float:
    if max_distance_km:
        return max_distance_km * 1000 * SEARCH_RADIUS_FACTOR
    return DEFAULT_SEARCH_RADIUS_METERS


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def meters_to_km(meters: float) -> float:
    return round(meters / 1000, 2)


class RankingPipeline:
    """Turns a search origin and optional limits into ranked shops.

    The pipeline fetches a bounded candidate set from the geo store, looks up
    walking routes for the whole batch in one go, drops candidates without a
    route, applies the distance and time limits and orders by walking time.
    """

    def __init__(
        self,
        geo_store: GeoStore,
        enrichment_client: DistanceEnrichmentClient,
        candidate_limit: int = CANDIDATE_LIMIT,
    ):
        self.geo_store = geo_store
        self.enrichment_client = enrichment_client
        self.candidate_limit = candidate_limit

    def search(
        self,
        origin: Optional[GeoPoint],
        max_distance_km: Optional[float] = None,
        max_walking_time_minutes: Optional[int] = None,
    ) -> List[RankedResult]:
        """Ranked shops near ``origin``.

        Raises:
            InvalidRequestError: If the origin is missing or out of range
            ServiceError: If the store or the walking distance lookup fails;
                no partial results are returned
        """
        if origin is None or not is_valid_coordinate(origin.latitude, origin.longitude):
            raise InvalidRequestError("Latitude and longitude are required")

        radius = search_radius_meters(max_distance_km)
        logger.info(
            f"Search at {origin.latitude},{origin.longitude} radius={radius:.0f}m "
            f"max_distance_km={max_distance_km} max_walking_time_minutes={max_walking_time_minutes}"
        )

        candidates = self.geo_store.find_near(origin, radius, limit=self.candidate_limit)
        if not candidates:
            logger.info("Search completed: no candidates in radius")
            return []

        legs = self.enrichment_client.enrich(
            origin, [candidate.shop.location for candidate in candidates]
        )
        results = self._merge(candidates, legs)

        if max_distance_km:
            results = [r for r in results if r.walking_distance_km <= max_distance_km]
        if max_walking_time_minutes:
            results = [r for r in results if r.walking_time_minutes <= max_walking_time_minutes]

        # sorted() is stable, so equal walking times keep nearest-first order
        results = sorted(results, key=lambda r: r.walking_time_minutes)

        logger.info(f"Search completed: {len(results)} of {len(candidates)} candidates ranked")
        return results

    @staticmethod
    def _merge(candidates: List[Candidate], legs: list) -> List[RankedResult]:
        results = []
        for index, candidate in enumerate(candidates):
            leg = legs[index] if index < len(legs) else None
            if isinstance(leg, WalkingLeg):
                results.append(
                    RankedResult(
                        shop=candidate.shop,
                        current_metadata=candidate.current_metadata,
                        straight_line_distance_km=meters_to_km(
                            candidate.straight_line_distance_meters
                        ),
                        walking_distance_km=meters_to_km(leg.distance_meters),
                        walking_time_minutes=round_half_up(leg.travel_time_seconds / 60),
                    )
                )
            elif isinstance(leg, ElementFailed) or leg is None:
                continue
            else:
                raise TypeError(f"Unexpected enrichment result: {leg!r}")
        return results
