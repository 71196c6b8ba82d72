import logging
import uuid
from typing import Any, Dict
from sqlalchemy.orm import Session
from app.services.place_lookup import PlaceLookupClient
from app.services.search_history import search_history
from app.services.search_resolver import SearchResolver

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = 1000  # meters
LOCATION_NOT_FOUND = "LocationNotFound"


class RestaurantSearchService:
    """Records a search, resolves where it points, and lists nearby restaurants"""

    def __init__(self, place_client: PlaceLookupClient):
        self.place_client = place_client
        self.resolver = SearchResolver(place_client)

    def search(
        self,
        db: Session,
        user_id: uuid.UUID,
        term: str,
        radius: int = DEFAULT_RADIUS,
    ) -> Dict[str, Any]:
        # History is committed first so it survives a failing provider call
        search_history.record(db, term=term, radius=radius, user_id=user_id)

        location = self.resolver.resolve(term)
        if location is None:
            return {"error": LOCATION_NOT_FOUND, "restaurants": []}

        restaurants = self.place_client.search_places(location.lat, location.lon, radius)
        logger.info(f"Found {len(restaurants)} restaurants for user {user_id}")

        return {
            "searchLocation": {
                "query": term,
                "resolvedLocation": {"lat": location.lat, "lon": location.lon},
            },
            "count": len(restaurants),
            "restaurants": restaurants,
        }
