import logging
import math
import threading
import time
from dataclasses import asdict
from typing import List
from urllib.parse import quote

import requests
from django.core.cache import cache
from django.conf import settings

from ..exceptions import GeocodingError
from .service_area import Location

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

# Mapbox context id prefix -> address key
CONTEXT_KEYS = {
    "postcode": "postcode",
    "place": "city",
    "district": "district",
    "region": "state",
    "country": "country",
    "locality": "locality",
    "neighborhood": "neighborhood",
}


def haversine_km(origin: Location, destination: Location) -> float:
    """Great-circle distance between two locations, rounded to 2 dp."""
    lat1, lon1 = math.radians(float(origin.lat)), math.radians(float(origin.lon))
    lat2, lon2 = math.radians(float(destination.lat)), math.radians(float(destination.lon))
    d_lat = lat2 - lat1
    d_lon = lon2 - lon1
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_KM * c, 2)


class GeocodingService:
    """Forward geocoding through the Mapbox Places API with server-side caching.

    Public method:
        geocode(query: str, limit: int = 5) -> List[Location]

    Caching:
        Results are stored in the Django cache under ``geocode:{limit}:{normalized query}``,
        so any configured cache backend can hold them. Timeout is
        ``settings.GEOCODE_CACHE_TIMEOUT`` (seconds).

    Rate limiting:
        Upstream calls are spaced at least ``settings.GEOCODE_MIN_INTERVAL_MS`` apart
        within this process.
    """

    _lock = threading.Lock()
    _last_request_ts = 0.0

    @staticmethod
    def _cache_key(query: str, limit: int) -> str:
        return f"geocode:{limit}:{query}"

    @staticmethod
    def _parse_address(feature: dict) -> dict:
        address = {"name": feature.get("text") or ""}
        for ctx in feature.get("context") or []:
            kind = (ctx.get("id") or "").split(".")[0]
            key = CONTEXT_KEYS.get(kind)
            if not key:
                continue
            address[key] = ctx.get("text")
            if kind == "country":
                address["country_code"] = ctx.get("short_code") or ""
        place_types = feature.get("place_type") or []
        if place_types:
            address["place_type"] = place_types[0]
        return address

    @staticmethod
    def _in_india(feature: dict) -> bool:
        for ctx in feature.get("context") or []:
            if (ctx.get("id") or "").startswith("country"):
                return (ctx.get("short_code") or "").lower() == "in"
        return False

    @classmethod
    def _to_location(cls, feature: dict) -> Location:
        lon, lat = feature["center"]
        place_types = feature.get("place_type") or []
        return Location(
            display_name=feature.get("place_name") or "",
            lat=float(lat),
            lon=float(lon),
            address=cls._parse_address(feature),
            place_id=feature.get("id") or "",
            type=place_types[0] if place_types else "unknown",
        )

    @classmethod
    def _wait_for_slot(cls):
        min_interval = getattr(settings, "GEOCODE_MIN_INTERVAL_MS", 100) / 1000.0
        with cls._lock:
            since = time.monotonic() - cls._last_request_ts
            if since < min_interval:
                time.sleep(min_interval - since)
            cls._last_request_ts = time.monotonic()

    @classmethod
    def geocode(cls, query: str, limit: int = 5, use_cache: bool = True) -> List[Location]:
        if not query or len(query.strip()) < 2:
            return []

        token = getattr(settings, "MAPBOX_TOKEN", None)
        if not token:
            raise GeocodingError("MAPBOX_TOKEN is not configured in settings")

        normalized = query.strip().lower()
        key = cls._cache_key(normalized, limit)
        if use_cache:
            cached = cache.get(key)
            if cached is not None:
                logger.debug("geocode cache hit for %r (%s results)", normalized, len(cached))
                return [Location(**row) for row in cached]

        cls._wait_for_slot()

        url = f"{settings.GEOCODE_URL}{quote(query.strip())}.json"
        params = {
            "access_token": token,
            "limit": limit,
            "country": "in",
            "language": "en",
            "types": "place,locality,neighborhood,address,poi",
        }

        try:
            resp = requests.get(url, params=params, headers={"Accept": "application/json"}, timeout=10)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            logger.exception("Mapbox geocode request failed")
            raise GeocodingError(f"Error calling Mapbox geocoding API: {exc}")

        try:
            locations = [cls._to_location(f) for f in data.get("features", []) if cls._in_india(f)]
        except (KeyError, TypeError, ValueError) as exc:
            logger.exception("Unexpected Mapbox response format")
            raise GeocodingError("Unexpected geocoding response format") from exc

        timeout = getattr(settings, "GEOCODE_CACHE_TIMEOUT", 24 * 3600)
        try:
            cache.set(key, [asdict(loc) for loc in locations], timeout=timeout)
        except Exception:
            logger.exception("Failed to set geocode cache (non-fatal)")

        logger.debug("Geocoded %r to %s results", normalized, len(locations))
        return locations
