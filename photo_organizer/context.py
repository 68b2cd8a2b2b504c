"""Per-file context: lazily built, memoised providers for placeholder values."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple
import logging
import os

from .errors import (
    CreationTimeUnavailable,
    FileAccessError,
    GeocodingError,
    MissingCoordinatesError,
    MissingFieldError,
    PlaceholderError,
)
from .extractor import ExifData
from .geocache import LocationCache
from .geocoder import LocationInfo
from .template.placeholders import TemplateRequirements


class FileTimes:
    """Filesystem timestamps of one file, stat'ed once."""

    def __init__(self, path):
        self.path = Path(path)
        try:
            self._stat = os.stat(self.path)
        except OSError as exc:
            raise FileAccessError(f"Cannot stat {self.path}: {exc}") from exc

    def created(self) -> datetime:
        birth = getattr(self._stat, "st_birthtime", None)
        if birth is None and os.name == "nt":
            # st_ctime is the creation time on Windows
            birth = self._stat.st_ctime
        if birth is None:
            raise CreationTimeUnavailable(f"No creation time recorded for {self.path} on this platform")
        return datetime.fromtimestamp(birth)

    def modified(self) -> datetime:
        return datetime.fromtimestamp(self._stat.st_mtime)


class FileContext:
    """Providers for a single file.

    Each provider is constructed on first use and at most once. A construction
    failure is remembered and raised again to every placeholder that asks for
    that provider, without affecting the other providers.
    """

    def __init__(self, path, requirements: TemplateRequirements,
                 locations: Optional[LocationCache] = None):
        self.path = Path(path)
        self.requirements = requirements
        self._locations = locations
        self._providers: Dict[str, Tuple[Any, Optional[PlaceholderError]]] = {}

    def _provide(self, name: str, needed: bool, factory: Callable[[], Any]):
        if not needed:
            raise RuntimeError(f"{name} provider is not enabled for this template")
        if name not in self._providers:
            try:
                self._providers[name] = (factory(), None)
            except PlaceholderError as exc:
                logging.debug("%s unavailable for %s: %s", name, self.path, exc)
                self._providers[name] = (None, exc)
        value, error = self._providers[name]
        if error is not None:
            raise error
        return value

    def exif(self) -> ExifData:
        return self._provide("exif", self.requirements.needs_exif, lambda: ExifData.open(self.path))

    def file_times(self) -> FileTimes:
        return self._provide("file times", self.requirements.needs_filesystem_time, lambda: FileTimes(self.path))

    def location(self) -> LocationInfo:
        return self._provide("location", self.requirements.needs_location, self._lookup_location)

    def _lookup_location(self) -> LocationInfo:
        if self._locations is None:
            raise GeocodingError("No reverse geocoding provider configured")
        exif = self.exif()
        try:
            lat, lon = exif.latitude(), exif.longitude()
        except MissingFieldError as exc:
            raise MissingCoordinatesError(f"Latitude or longitude missing in {self.path}: {exc}") from exc
        return self._locations.resolve(lat, lon)

    def built(self) -> Dict[str, bool]:
        """Which providers were constructed, and whether they succeeded."""
        return {name: error is None for name, (_, error) in self._providers.items()}
