"""Exception hierarchy shared by the template engine and its collaborators."""
from __future__ import annotations


class PhotoOrganizerError(Exception):
    """Base exception for the application."""


class ConfigError(PhotoOrganizerError):
    """Raised when settings or command-line options are inconsistent."""


class PlaceholderError(PhotoOrganizerError):
    """A single placeholder alternative could not be resolved for a file.

    These never leave the formatter: the next alternative is tried instead.
    """


class ExifReadError(PlaceholderError):
    """Raised when a file cannot be opened or carries no EXIF block."""

    def __init__(self, path, reason: str):
        super().__init__(f"Cannot read EXIF from {path}: {reason}")
        self.path = path
        self.reason = reason


class MissingFieldError(PlaceholderError):
    """Raised when an EXIF field is absent or malformed."""

    def __init__(self, field: str, detail: str | None = None):
        message = f"Missing EXIF field: {field}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.field = field


class CreationTimeUnavailable(PlaceholderError):
    """The platform does not record a file creation time."""


class MissingCoordinatesError(PlaceholderError):
    """Latitude or longitude is missing, so no location can be looked up."""


class GeocodingError(PlaceholderError):
    """Reverse geocoding failed (transport, timeout or unparsable answer)."""


class UnknownPlaceholderError(PlaceholderError):
    """The `%token` is not a registered placeholder."""


class UnresolvedPlaceholderError(PhotoOrganizerError):
    """Raised in strict mode when a group falls back to its label."""

    def __init__(self, path, group: str, reasons):
        joined = "; ".join(str(r) for r in reasons) or "no alternative matched"
        super().__init__(f"Cannot resolve {group!r} for {path}: {joined}")
        self.path = path
        self.group = group
        self.reasons = list(reasons)


class FileAccessError(PlaceholderError):
    """The input file could not be stat'ed."""
