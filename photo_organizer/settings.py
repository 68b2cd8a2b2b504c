"""Settings: defaults, an optional JSON settings file, and command-line overrides.

The settings file is looked up in this order: an explicit path (``--config``),
``$PHOTO_ORGANIZER_CONFIG``, then ``~/.photo_organizer.json``. Unknown keys
and values of the wrong type are ignored with a warning.

Example file::

    {
        "folder_format": "%year/{%city|%camera_brand|To sort}",
        "reverse_geocoding": "nominatim",
        "nominatim_email": "me@example.org",
        "gps_optimization": true,
        "location_aliases": {"Dublin 2": "Dublin"}
    }
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
import json
import logging
import os

from .copier import STRATEGIES
from .errors import ConfigError
from .geocache import DEFAULT_PRECISION
from .geocoder import GEOCODERS

ENV_CONFIG = "PHOTO_ORGANIZER_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".photo_organizer.json"


@dataclass
class Settings:
    source: Optional[str] = None
    destination: Optional[str] = None
    recursive: bool = False
    extensions: List[str] = field(default_factory=list)
    exclude_extensions: List[str] = field(default_factory=list)
    include_regex: Optional[str] = None
    exclude_regex: Optional[str] = None
    size_greater: Optional[int] = None
    size_lower: Optional[int] = None
    dry_run: bool = False
    dry_run_number_of_files: int = 10
    folder_format: Optional[str] = None
    filename_format: Optional[str] = None
    strategy: str = "copy"
    drop_duplicates: bool = False
    reverse_geocoding: Optional[str] = None
    nominatim_email: Optional[str] = None
    gps_optimization: bool = False
    gps_precision: int = DEFAULT_PRECISION
    geocache: Optional[str] = None
    skip_unresolved: bool = False
    location_aliases: Dict[str, str] = field(default_factory=dict)
    log_file: Optional[str] = None

    def merged(self, overrides: Mapping[str, Any]) -> "Settings":
        """Copy with every non-None override applied (empty tuples count as unset)."""
        known = {f.name for f in fields(self)}
        values = {}
        for key, value in overrides.items():
            if key not in known or value is None:
                continue
            if isinstance(value, tuple):
                if not value:
                    continue
                value = list(value)
            values[key] = value
        return replace(self, **values)

    def full_template(self) -> str:
        """Folder format joined with the file name format."""
        if self.folder_format and self.filename_format:
            return f"{self.folder_format.rstrip('/')}/{self.filename_format}"
        if self.folder_format:
            return f"{self.folder_format.rstrip('/')}/%original_filename"
        if self.filename_format:
            return self.filename_format
        raise ConfigError("You should provide at least one of the folder or filename format.")

    def validate(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ConfigError(f"Unknown strategy {self.strategy!r}; choose from {', '.join(STRATEGIES)}")
        if self.reverse_geocoding and self.reverse_geocoding not in GEOCODERS:
            raise ConfigError(f"Unknown reverse geocoding provider {self.reverse_geocoding!r}")
        if self.reverse_geocoding == "nominatim" and not self.nominatim_email:
            raise ConfigError("Nominatim requires an e-mail address (--nominatim-email)")
        if self.gps_precision < 0:
            raise ConfigError("GPS precision must be zero or positive")

    @property
    def geocode_precision(self) -> Optional[int]:
        return self.gps_precision if self.gps_optimization else None


_FIELD_TYPES = {
    "recursive": bool,
    "dry_run": bool,
    "drop_duplicates": bool,
    "gps_optimization": bool,
    "skip_unresolved": bool,
    "dry_run_number_of_files": int,
    "gps_precision": int,
    "size_greater": int,
    "size_lower": int,
    "extensions": list,
    "exclude_extensions": list,
    "location_aliases": dict,
}


def config_path(explicit: Optional[str] = None) -> Optional[Path]:
    if explicit:
        return Path(explicit).expanduser()
    env = os.environ.get(ENV_CONFIG)
    if env:
        return Path(env).expanduser()
    return DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None


def _clean_values(raw: Mapping[str, Any], source: Path) -> Dict[str, Any]:
    known = {f.name for f in fields(Settings)}
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            logging.warning("Ignoring unknown setting %r in %s", key, source)
            continue
        expected = _FIELD_TYPES.get(key, str)
        # bool is an int subclass; reject it for numeric fields
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            logging.warning("Ignoring setting %r in %s: expected %s", key, source, expected.__name__)
            continue
        if key == "location_aliases":
            value = {k.strip(): v.strip() for k, v in value.items() if isinstance(k, str) and isinstance(v, str)}
        elif expected is list:
            value = [str(v) for v in value]
        values[key] = value
    return values


def load_settings(explicit: Optional[str] = None) -> Settings:
    path = config_path(explicit)
    if path is None:
        return Settings()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        if explicit:
            raise ConfigError(f"Settings file not found: {path}") from exc
        return Settings()
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Cannot read settings file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Settings file {path} must contain a JSON object")
    logging.debug("Loaded settings from %s", path)
    return Settings(**_clean_values(raw, path))
