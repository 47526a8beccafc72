"""
Kakao Local API Client.
Keyword (places) search for fitting the map view, and address geocoding for
listings entered without coordinates. Disabled when no REST API key is set.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from homepick.config import settings
from homepick.errors import MapServiceError

logger = logging.getLogger(__name__)

KAKAO_LOCAL_URL = "https://dapi.kakao.com/v2/local/search"


class KakaoLocalClient:
    """Client for Kakao Local keyword search and address geocoding."""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.kakao_rest_api_key
        self.enabled = bool(self.api_key)

    def _get(self, endpoint: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        try:
            resp = requests.get(
                f"{KAKAO_LOCAL_URL}/{endpoint}.json",
                params=params,
                headers={"Authorization": f"KakaoAK {self.api_key}"},
                timeout=10,
            )
            resp.raise_for_status()
            return resp.json().get("documents", [])
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Kakao {endpoint} search failed for {params}: {e}")
            raise MapServiceError(f"Kakao {endpoint} search failed") from e

    def keyword_search(self, keyword: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Search places by keyword. Returns up to `limit` places as
        {"name", "address", "lat", "lng"}.
        """
        if not self.enabled:
            raise MapServiceError("Kakao REST API key not configured")

        limit = limit or settings.map_search_limit
        documents = self._get("keyword", {"query": keyword, "size": min(max(limit, 1), 15)})
        places = []
        for doc in documents[:limit]:
            try:
                places.append({
                    "name": doc.get("place_name", ""),
                    "address": doc.get("road_address_name") or doc.get("address_name", ""),
                    "lat": float(doc["y"]),
                    "lng": float(doc["x"]),
                })
            except (KeyError, TypeError, ValueError):
                logger.debug(f"Skipping place without coordinates: {doc}")
        return places

    def geocode(self, address: str) -> Optional[Tuple[float, float]]:
        """
        Geocode an address to (lat, lng).
        Returns None if the API is not configured, the lookup fails or nothing matches.
        """
        if not self.enabled or not address.strip():
            return None

        try:
            documents = self._get("address", {"query": address})
        except MapServiceError:
            return None
        if not documents:
            logger.info(f"No geocoding match for '{address}'")
            return None
        try:
            return (float(documents[0]["y"]), float(documents[0]["x"]))
        except (KeyError, TypeError, ValueError):
            return None


def bounds_for(places: List[Dict[str, Any]]) -> Optional[Dict[str, Dict[str, float]]]:
    """South-west / north-east bounds enclosing all places."""
    if not places:
        return None
    lats = [p["lat"] for p in places]
    lngs = [p["lng"] for p in places]
    return {
        "sw": {"lat": min(lats), "lng": min(lngs)},
        "ne": {"lat": max(lats), "lng": max(lngs)},
    }


def get_kakao_client() -> KakaoLocalClient:
    """FastAPI dependency."""
    return KakaoLocalClient()
