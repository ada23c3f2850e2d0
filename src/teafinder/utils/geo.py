"""Geospatial helpers for the shop grid index and distance calculations."""

import math
from typing import List, Optional, Tuple

EARTH_RADIUS_METERS = 6371008.8
# Pads the search box so points on the circle edge are never left out
BOUNDING_BOX_MARGIN = 1.001

# Upper bound on index queries issued for a single radius search
MAX_CELLS_PER_SEARCH = 64


def is_valid_coordinate(latitude: Optional[float], longitude: Optional[float]) -> bool:
    """Check that a latitude/longitude pair is present and within range."""
    if latitude is None or longitude is None:
        return False
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        return False
    try:
        lat = float(latitude)
        lng = float(longitude)
    except (TypeError, ValueError):
        return False
    if math.isnan(lat) or math.isnan(lng):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(a)))


class GridBucketer:
    """Maps latitude/longitude pairs into deterministic grid cells.

    Cells are indexed from the south-west corner of the globe so every index is
    non-negative, and longitude indices wrap at the antimeridian.
    """

    def __init__(self, cell_size_degrees: float, attribute: str, index_name: str) -> None:
        self.cell_size_degrees = cell_size_degrees
        self.attribute = attribute
        self.index_name = index_name
        self.lat_cells = int(round(180.0 / cell_size_degrees))
        self.lon_cells = int(round(360.0 / cell_size_degrees))

    def _lat_index(self, latitude: float) -> int:
        index = math.floor((latitude + 90.0) / self.cell_size_degrees)
        return min(max(index, 0), self.lat_cells - 1)

    def _lon_index(self, longitude: float) -> int:
        return math.floor((longitude + 180.0) / self.cell_size_degrees) % self.lon_cells

    def cell_id(self, latitude: float, longitude: float) -> str:
        return f"{self._lat_index(latitude)}_{self._lon_index(longitude)}"

    def _index_ranges(
        self, latitude: float, longitude: float, radius_meters: float
    ) -> Tuple[List[int], List[int]]:
        # Angular radius on the same sphere as haversine_meters
        angle = radius_meters / EARTH_RADIUS_METERS * BOUNDING_BOX_MARGIN
        d_lat = math.degrees(angle)
        lat_min = max(latitude - d_lat, -90.0)
        lat_max = min(latitude + d_lat, 90.0)
        lat_indices = list(range(self._lat_index(lat_min), self._lat_index(lat_max) + 1))

        # A circle reaching a pole touches every longitude
        if lat_min <= -90.0 or lat_max >= 90.0 or angle >= math.pi / 2:
            return lat_indices, list(range(self.lon_cells))

        # Widest longitude span of a spherical cap centred at this latitude
        ratio = math.sin(angle) / math.cos(math.radians(latitude))
        if ratio >= 1.0:
            return lat_indices, list(range(self.lon_cells))
        d_lon = math.degrees(math.asin(ratio))

        first = math.floor((longitude - d_lon + 180.0) / self.cell_size_degrees)
        last = math.floor((longitude + d_lon + 180.0) / self.cell_size_degrees)
        lon_indices: List[int] = []
        for raw in range(first, last + 1):
            wrapped = raw % self.lon_cells
            if wrapped not in lon_indices:
                lon_indices.append(wrapped)
        return lat_indices, lon_indices

    def covering_cell_count(self, latitude: float, longitude: float, radius_meters: float) -> int:
        lat_indices, lon_indices = self._index_ranges(latitude, longitude, radius_meters)
        return len(lat_indices) * len(lon_indices)

    def covering_cells(self, latitude: float, longitude: float, radius_meters: float) -> List[str]:
        """All cell ids intersecting the bounding box of a search circle."""
        lat_indices, lon_indices = self._index_ranges(latitude, longitude, radius_meters)
        return [f"{lat}_{lon}" for lat in lat_indices for lon in lon_indices]


FINE_GRID = GridBucketer(0.05, attribute="cell_fine", index_name="cell-fine-index")
COARSE_GRID = GridBucketer(0.5, attribute="cell_coarse", index_name="cell-coarse-index")
GRID_LEVELS = (FINE_GRID, COARSE_GRID)


def choose_grid(latitude: float, longitude: float, radius_meters: float) -> GridBucketer:
    """Pick the finest grid level that covers the circle with few enough cells."""
    for grid in GRID_LEVELS:
        if grid.covering_cell_count(latitude, longitude, radius_meters) <= MAX_CELLS_PER_SEARCH:
            return grid
    return GRID_LEVELS[-1]
