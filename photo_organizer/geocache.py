"""Location cache: coordinate rounding, memoisation and rate limiting in front of a geocoder.

One `LocationCache` lives for a whole run and is shared by every file. With
rounding enabled, coordinates are rounded to `precision` decimals and the
geocoder is asked about the rounded point, so nearby shots share one lookup.
Every call that does reach the geocoder waits until `min_interval` seconds
have passed since the previous call finished, successful or not.
"""
from __future__ import annotations

from contextlib import contextmanager
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Callable, Dict, NamedTuple, Optional, Tuple
import json
import logging
import threading
import time

from .geocoder import Geocoder, LocationInfo

# two decimals is roughly 1.1 km of latitude
DEFAULT_PRECISION = 2


def round_coordinate(value: float, precision: int) -> str:
    """Round half-up on the shortest decimal representation of `value`."""
    quantum = Decimal(1).scaleb(-precision)
    rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)
    return format(rounded, "f")


class GeoKey(NamedTuple):
    lat: str
    lon: str

    @classmethod
    def from_coordinates(cls, lat: float, lon: float, precision: int) -> "GeoKey":
        return cls(round_coordinate(lat, precision), round_coordinate(lon, precision))

    @classmethod
    def parse(cls, text: str) -> "GeoKey":
        lat, lon = text.split(",")
        return cls(lat.strip(), lon.strip())

    def coordinates(self) -> Tuple[float, float]:
        return float(self.lat), float(self.lon)

    def __str__(self) -> str:
        return f"{self.lat},{self.lon}"


class RateLimiter:
    """Keeps at least `min_interval` seconds between consecutive calls."""

    def __init__(self, min_interval: float, clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.min_interval = max(0.0, float(min_interval))
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None

    @property
    def last_call(self) -> Optional[float]:
        return self._last_call

    def wait(self) -> float:
        """Block until a call is allowed; return the time slept."""
        if self._last_call is None or self.min_interval <= 0:
            return 0.0
        remaining = self._last_call + self.min_interval - self._clock()
        if remaining <= 0:
            return 0.0
        logging.debug("Rate limit: sleeping %.3fs before next geocoding call", remaining)
        self._sleep(remaining)
        return remaining

    def mark(self) -> None:
        self._last_call = self._clock()

    @contextmanager
    def call(self):
        self.wait()
        try:
            yield
        finally:
            self.mark()


class LocationCache:
    """Memoising, rate-limited front for a `Geocoder`.

    `precision=None` disables rounding: every lookup reaches the geocoder
    (still rate-limited) and nothing is memoised. Failed lookups are never
    stored, so the same key can be retried later.
    """

    def __init__(self, geocoder: Geocoder, precision: Optional[int] = DEFAULT_PRECISION,
                 min_interval: Optional[float] = None, cache_path: Optional[Path] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        if precision is not None and precision < 0:
            raise ValueError("precision must be >= 0")
        self.geocoder = geocoder
        self.precision = precision
        interval = geocoder.min_interval if min_interval is None else min_interval
        self.limiter = RateLimiter(interval, clock=clock, sleep=sleep)
        self.cache_path = Path(cache_path) if cache_path else None
        self._memo: Dict[GeoKey, LocationInfo] = {}
        # serialises lookups when several jobs share one cache
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.calls = 0
        if self.cache_path is not None and self.rounding_enabled:
            self._load()

    @property
    def rounding_enabled(self) -> bool:
        return self.precision is not None

    def __len__(self) -> int:
        return len(self._memo)

    def __contains__(self, key: GeoKey) -> bool:
        return key in self._memo

    def key_for(self, lat: float, lon: float) -> GeoKey:
        if self.precision is None:
            raise ValueError("rounding is disabled")
        return GeoKey.from_coordinates(lat, lon, self.precision)

    def resolve(self, lat: float, lon: float) -> LocationInfo:
        with self._lock:
            if self.precision is None:
                return self._call(lat, lon)

            key = self.key_for(lat, lon)
            cached = self._memo.get(key)
            if cached is not None:
                self.hits += 1
                logging.debug("Location cache hit for %s", key)
                return cached

            self.misses += 1
            location = self._call(*key.coordinates())
            self._memo[key] = location
            self._save()
            return location

    def _call(self, lat: float, lon: float) -> LocationInfo:
        self.calls += 1
        with self.limiter.call():
            logging.debug("Reverse geocoding (%s, %s) with %s", lat, lon, self.geocoder.name)
            return self.geocoder.reverse(lat, lon)

    def _load(self) -> None:
        if not self.cache_path.exists():
            return
        try:
            raw = json.loads(self.cache_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logging.warning("Ignoring unreadable geocode cache %s", self.cache_path)
            return
        if not isinstance(raw, dict):
            logging.warning("Ignoring geocode cache %s: expected a JSON object", self.cache_path)
            return
        if raw.get("precision") != self.precision or raw.get("provider") != self.geocoder.name:
            logging.info("Geocode cache %s was built with other settings, starting empty", self.cache_path)
            return
        for text, data in (raw.get("locations") or {}).items():
            try:
                self._memo[GeoKey.parse(text)] = LocationInfo.from_dict(data)
            except (ValueError, TypeError, AttributeError):
                logging.debug("Skipping malformed geocode cache entry %r", text)

    def _save(self) -> None:
        if self.cache_path is None:
            return
        payload = {
            "provider": self.geocoder.name,
            "precision": self.precision,
            "locations": {str(key): info.to_dict() for key, info in self._memo.items()},
        }
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            self.cache_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError:
            logging.exception("Failed to write geocode cache")
