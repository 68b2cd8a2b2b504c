"""Photo Organizer package - render destination paths for photos from placeholder templates and place the files there."""

from .formatter import PathFormatter, format_path
from .geocache import LocationCache
from .geocoder import LocationInfo, NominatimGeocoder, OfflineGeocoder
from .template import parse_placeholders, parse_template

__all__ = [
    "LocationCache",
    "LocationInfo",
    "NominatimGeocoder",
    "OfflineGeocoder",
    "PathFormatter",
    "format_path",
    "parse_placeholders",
    "parse_template",
]
