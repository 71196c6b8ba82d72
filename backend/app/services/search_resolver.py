import logging
import re
from typing import Optional
from app.services.place_lookup import Coordinates, PlaceLookupClient

logger = logging.getLogger(__name__)

# "lat, lon" with optional minus signs and fractions, e.g. "4.60971, -74.08175"
COORDINATES_PATTERN = re.compile(r"(-?\d+(\.\d+)?),\s*(-?\d+(\.\d+)?)")


def parse_coordinates(term: str) -> Optional[Coordinates]:
    """Parse a literal coordinate pair, or return None if term is not one"""
    # fullmatch so trailing text, even a lone newline, is not a coordinate pair
    match = COORDINATES_PATTERN.fullmatch(term)
    if not match:
        return None
    return Coordinates(lat=float(match.group(1)), lon=float(match.group(3)))


class SearchResolver:
    """Turns a search term into the point to search around"""

    def __init__(self, place_client: PlaceLookupClient):
        self.place_client = place_client

    def resolve(self, term: str) -> Optional[Coordinates]:
        """
        Resolve a search term to coordinates.

        Literal coordinates are used as-is without calling the provider.
        Anything else is geocoded and the first candidate wins. Returns None
        when the provider has no candidates (location not found).
        """
        coordinates = parse_coordinates(term)
        if coordinates is not None:
            return coordinates

        candidates = self.place_client.geocode(term)
        if not candidates:
            logger.info(f"No geocode candidates for {term!r}")
            return None
        return candidates[0]
