"""Reverse geocoders: turn (latitude, longitude) into place names.

`NominatimGeocoder` asks OpenStreetMap's Nominatim service through geopy and
must not be called more than once per `min_interval` seconds; the location
cache enforces that. `OfflineGeocoder` uses the bundled `reverse_geocoder`
dataset and needs no delay.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional
import logging

import reverse_geocoder as rg
from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from .errors import ConfigError, GeocodingError


@dataclass(frozen=True)
class LocationInfo:
    country: Optional[str] = None
    state: Optional[str] = None
    county: Optional[str] = None
    municipality: Optional[str] = None
    city: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "LocationInfo":
        return cls(**{key: data.get(key) for key in ("country", "state", "county", "municipality", "city")})


class Geocoder:
    """Interface of a reverse geocoding client."""

    name = "base"
    min_interval = 0.0

    def reverse(self, lat: float, lon: float) -> LocationInfo:
        raise NotImplementedError


class NominatimGeocoder(Geocoder):
    """Nominatim via geopy.

    The usage policy asks for an identifying user agent (we send the user's
    e-mail) and at most one request per second.
    """

    name = "nominatim"
    min_interval = 1.1

    def __init__(self, email: str, timeout: float = 10.0, language: str = "en", zoom: int = 10):
        if not email:
            raise ConfigError("Nominatim requires an e-mail address (--nominatim-email)")
        self.email = email
        self.language = language
        self.zoom = zoom
        self._client = Nominatim(user_agent=email, timeout=timeout)

    def reverse(self, lat: float, lon: float) -> LocationInfo:
        # geopy rejects out-of-range coordinates with ValueError before any request
        try:
            loc = self._client.reverse(
                (lat, lon),
                exactly_one=True,
                language=self.language,
                addressdetails=True,
                zoom=self.zoom,
            )
        except (GeopyError, ValueError) as exc:
            raise GeocodingError(f"Nominatim lookup failed for ({lat}, {lon}): {exc}") from exc
        if not loc:
            raise GeocodingError(f"Nominatim found nothing at ({lat}, {lon})")
        addr = loc.raw.get("address")
        if not isinstance(addr, dict):
            raise GeocodingError(f"Nominatim answer for ({lat}, {lon}) has no address")
        return LocationInfo(
            country=addr.get("country"),
            state=addr.get("state"),
            county=addr.get("county"),
            municipality=addr.get("municipality"),
            city=addr.get("city") or addr.get("town") or addr.get("village"),
        )


class OfflineGeocoder(Geocoder):
    """City-level lookup from the `reverse_geocoder` dataset, no network."""

    name = "offline"

    def reverse(self, lat: float, lon: float) -> LocationInfo:
        try:
            results = rg.search([(lat, lon)], mode=1)
        except (ValueError, OSError) as exc:
            raise GeocodingError(f"Offline lookup failed for ({lat}, {lon}): {exc}") from exc
        if not results:
            raise GeocodingError(f"Offline lookup found nothing at ({lat}, {lon})")
        r = results[0]
        return LocationInfo(
            country=r.get("cc") or None,
            state=r.get("admin1") or None,
            county=r.get("admin2") or None,
            city=r.get("name") or None,
        )


GEOCODERS = ("nominatim", "offline")


def build_geocoder(name: Optional[str], email: Optional[str] = None) -> Optional[Geocoder]:
    """Return the geocoder called `name`, or None when no provider is configured."""
    if not name:
        return None
    if name == "nominatim":
        return NominatimGeocoder(email)
    if name == "offline":
        return OfflineGeocoder()
    logging.debug("Unknown geocoder requested: %s", name)
    raise ConfigError(f"Unknown reverse geocoding provider: {name!r} (choose from {', '.join(GEOCODERS)})")
