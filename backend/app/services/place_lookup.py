"""
Client for the Geoapify geocoding and places APIs.

Provider responses are GeoJSON feature collections. Feature coordinates are
[lon, lat]; everything handed back to callers uses explicit lat/lon names.
"""

import logging
from typing import Any, Dict, List, NamedTuple, Optional
import requests
from app.core.config import Settings
from app.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "restaurant"
DEFAULT_LIMIT = 20

ADDRESS_FIELDS = (
    "formatted",
    "street",
    "housenumber",
    "suburb",
    "city",
    "state",
    "postcode",
    "country",
)


class Coordinates(NamedTuple):
    lat: float
    lon: float


def _feature_coordinates(feature: Dict[str, Any]) -> Optional[Coordinates]:
    coordinates = (feature.get("geometry") or {}).get("coordinates")
    if not coordinates or len(coordinates) < 2:
        return None
    lon, lat = coordinates[0], coordinates[1]
    return Coordinates(lat=lat, lon=lon)


def normalize_place(feature: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map one provider feature to a restaurant record.

    Missing provider fields come through as None; no defaults are invented.
    """
    properties = feature.get("properties") or {}
    location = _feature_coordinates(feature)

    return {
        "id": properties.get("place_id"),
        "name": properties.get("name"),
        "location": location._asdict() if location else None,
        "address": {field: properties.get(field) for field in ADDRESS_FIELDS},
        "contact": {
            "phone": properties.get("phone"),
            "website": properties.get("website"),
        },
        "categories": properties.get("categories"),
        "distance": properties.get("distance"),
        "opening_hours": properties.get("opening_hours"),
        "wheelchair": properties.get("wheelchair"),
    }


class PlaceLookupClient:
    """Blocking geocode and places lookups. One attempt per call, no retries."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self._api_key = settings.GEOGRAPHY_API_KEY
        self._base_url = settings.GEOAPIFY_BASE_URL.rstrip("/")
        self._timeout = settings.EXTERNAL_REQUEST_TIMEOUT
        self._session = session or requests.Session()

    def _get_features(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        url = f"{self._base_url}{path}"
        # The key is added last so debug logs never contain it
        logger.debug("Provider request: %s %s", url, params)
        try:
            response = self._session.get(
                url,
                params={**params, "apiKey": self._api_key},
                timeout=self._timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error(f"Provider request to {path} failed: {e}")
            raise ExternalServiceError(f"Request to {path} failed") from e
        except ValueError as e:
            logger.error(f"Provider returned a non-JSON body for {path}")
            raise ExternalServiceError(f"Invalid response from {path}") from e

        if not isinstance(payload, dict):
            raise ExternalServiceError(f"Unexpected response shape from {path}")
        return payload.get("features") or []

    def geocode(self, text: str) -> List[Coordinates]:
        """Resolve free text to candidate coordinates, best match first"""
        features = self._get_features("/v1/geocode/search", {"text": text})
        candidates = []
        for feature in features:
            coordinates = _feature_coordinates(feature)
            if coordinates is not None:
                candidates.append(coordinates)
        return candidates

    def search_places(
        self,
        lat: float,
        lon: float,
        radius: int,
        category: str = DEFAULT_CATEGORY,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Dict[str, Any]]:
        """Find places of a catering category within radius meters of a point"""
        features = self._get_features(
            "/v2/places",
            {
                "categories": f"catering.{category}",
                "filter": f"circle:{lon},{lat},{radius}",
                "limit": limit,
            },
        )
        return [normalize_place(feature) for feature in features]
