from __future__ import annotations

import logging
import os
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

NOMINATIM_URL = os.environ.get("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search")
GEOCODER_USER_AGENT = os.environ.get("GEOCODER_USER_AGENT", "Bhakti-Tradition-Map/1.0")
GEOCODER_COUNTRY_CODES = os.environ.get("GEOCODER_COUNTRY_CODES", "in")
GEOCODER_MIN_INTERVAL = float(os.environ.get("GEOCODER_MIN_INTERVAL", "1.0"))
GEOCODER_TIMEOUT = float(os.environ.get("GEOCODER_TIMEOUT", "10"))


@dataclass(frozen=True)
class GeocodeResult:
    latitude: float
    longitude: float
    display_name: str
    region: str


def region_from_display_name(display_name: str) -> str:
    # "Pandharpur, Solapur, Maharashtra, 413304, India" -> "Solapur"
    parts = [p.strip() for p in (display_name or "").split(",")]
    return parts[1] if len(parts) > 1 else ""


class NominatimGeocoder:
    """
    Place-name lookups against an OpenStreetMap Nominatim endpoint, scoped
    to `country_codes`. Consecutive requests are spaced by `min_interval`
    seconds (the public instance allows one per second).
    """

    def __init__(
        self,
        base_url: str = NOMINATIM_URL,
        user_agent: str = GEOCODER_USER_AGENT,
        country_codes: str = GEOCODER_COUNTRY_CODES,
        min_interval: float = GEOCODER_MIN_INTERVAL,
        timeout: float = GEOCODER_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.country_codes = country_codes
        self.min_interval = min_interval
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self._last_request = 0.0
        self._lock = threading.Lock()

    def _throttle(self) -> None:
        # sync routes run in a threadpool; one caller at a time may claim the next slot
        with self._lock:
            wait = self.min_interval - (time.monotonic() - self._last_request)
            if wait > 0:
                time.sleep(wait)
            self._last_request = time.monotonic()

    def search(self, query: str, limit: int = 1) -> List[Dict[str, Any]]:
        self._throttle()
        params = {
            "format": "json",
            "q": query,
            "limit": limit,
            "countrycodes": self.country_codes,
        }
        r = self.session.get(self.base_url, params=params, timeout=self.timeout)
        r.raise_for_status()
        data = r.json()
        return data if isinstance(data, list) else []

    def resolve(self, place_name: str) -> Optional[GeocodeResult]:
        """Coordinates for a place name, or None when not found or on any failure."""
        logger.info("Geocoding: %s", place_name)
        try:
            hits = self.search(place_name, limit=1)
            if not hits:
                logger.warning("No geocoding results for %r", place_name)
                return None
            top = hits[0]
            display_name = top.get("display_name") or place_name
            result = GeocodeResult(
                latitude=float(top["lat"]),
                longitude=float(top["lon"]),
                display_name=display_name,
                region=region_from_display_name(display_name),
            )
        except (requests.RequestException, ValueError, KeyError, TypeError) as e:
            logger.error("Geocoding error for %r: %s", place_name, e)
            return None

        logger.info("Geocoded %r: %s, %s", place_name, result.latitude, result.longitude)
        return result

    def suggest(self, query: str, limit: int = 5) -> List[Dict[str, Any]]:
        """Autocomplete candidates in the shape the contribution form expects."""
        try:
            hits = self.search(query, limit=limit)
        except (requests.RequestException, ValueError) as e:
            logger.error("Place suggestion lookup failed for %r: %s", query, e)
            return []

        out: List[Dict[str, Any]] = []
        for h in hits:
            full_name = h.get("display_name") or ""
            try:
                coords = [float(h["lat"]), float(h["lon"])]
            except (KeyError, TypeError, ValueError):
                continue
            out.append({
                "name": full_name.split(",")[0].strip(),
                "fullName": full_name,
                "coords": coords,
                "type": h.get("type"),
                "importance": h.get("importance") or 0,
            })
        return out


class SuggestionCache:
    """
    Memoizes place suggestions per lower-cased query for `ttl` seconds.
    One instance lives as long as the app that owns it.

    Expired entries are swept on every `put`, and at most `max_entries`
    are kept (oldest dropped first).
    """

    def __init__(
        self,
        ttl: float = 300.0,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self.clock = clock
        self._entries: "OrderedDict[str, Tuple[float, List[Dict[str, Any]]]]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def _key(query: str) -> str:
        return " ".join(query.lower().split())

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at > self.ttl

    def _sweep(self, now: float) -> None:
        # insertion order is age order, so expired entries sit at the front
        while self._entries:
            key, (stored_at, _) = next(iter(self._entries.items()))
            if not self._expired(stored_at, now):
                break
            del self._entries[key]

    def get(self, query: str) -> Optional[List[Dict[str, Any]]]:
        key = self._key(query)
        with self._lock:
            hit = self._entries.get(key)
            if hit is None:
                return None
            stored_at, value = hit
            if self._expired(stored_at, self.clock()):
                del self._entries[key]
                return None
            return value

    def put(self, query: str, value: List[Dict[str, Any]]) -> None:
        key = self._key(query)
        with self._lock:
            now = self.clock()
            self._entries.pop(key, None)
            self._entries[key] = (now, value)
            self._sweep(now)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
