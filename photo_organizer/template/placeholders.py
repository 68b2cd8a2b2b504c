"""Placeholder vocabulary and whole-template requirements.

Every `%token` found in a template is looked up in `PLACEHOLDERS`. Tokens that
are not registered classify as `PlaceholderKind.UNKNOWN` and never resolve;
plain text alternatives classify as `PlaceholderKind.LITERAL` and always
resolve to themselves.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable


class PlaceholderKind(Enum):
    # value is the human-readable field name used in fallback labels
    YEAR = "Year"
    MONTH = "Month"
    DAY = "Day"
    CREATED_YEAR = "Created Year"
    CREATED_MONTH = "Created Month"
    CREATED_DAY = "Created Day"
    MODIFIED_YEAR = "Modified Year"
    MODIFIED_MONTH = "Modified Month"
    MODIFIED_DAY = "Modified Day"
    WIDTH = "Width"
    HEIGHT = "Height"
    CAMERA_MODEL = "Camera Model"
    CAMERA_BRAND = "Camera Brand"
    COUNTRY = "Country"
    STATE = "State"
    COUNTY = "County"
    MUNICIPALITY = "Municipality"
    CITY = "City"
    ORIGINAL_FILENAME = "Original Filename"
    ORIGINAL_FOLDER = "Original Folder"
    UNKNOWN = "Unknown"
    LITERAL = "Literal"


class Category(Enum):
    EXIF = "exif"
    FILESYSTEM = "filesystem"
    LOCATION = "location"
    PATH = "path"
    NONE = "none"


PLACEHOLDERS: Dict[str, PlaceholderKind] = {
    "%year": PlaceholderKind.YEAR,
    "%month": PlaceholderKind.MONTH,
    "%day": PlaceholderKind.DAY,
    "%created_year": PlaceholderKind.CREATED_YEAR,
    "%created_month": PlaceholderKind.CREATED_MONTH,
    "%created_day": PlaceholderKind.CREATED_DAY,
    "%modified_year": PlaceholderKind.MODIFIED_YEAR,
    "%modified_month": PlaceholderKind.MODIFIED_MONTH,
    "%modified_day": PlaceholderKind.MODIFIED_DAY,
    "%width": PlaceholderKind.WIDTH,
    "%height": PlaceholderKind.HEIGHT,
    "%camera_model": PlaceholderKind.CAMERA_MODEL,
    "%camera_brand": PlaceholderKind.CAMERA_BRAND,
    "%country": PlaceholderKind.COUNTRY,
    "%state": PlaceholderKind.STATE,
    "%county": PlaceholderKind.COUNTY,
    "%municipality": PlaceholderKind.MUNICIPALITY,
    "%city": PlaceholderKind.CITY,
    "%original_filename": PlaceholderKind.ORIGINAL_FILENAME,
    "%original_folder": PlaceholderKind.ORIGINAL_FOLDER,
}

_EXIF_KINDS = {
    PlaceholderKind.YEAR,
    PlaceholderKind.MONTH,
    PlaceholderKind.DAY,
    PlaceholderKind.WIDTH,
    PlaceholderKind.HEIGHT,
    PlaceholderKind.CAMERA_MODEL,
    PlaceholderKind.CAMERA_BRAND,
}
_FILESYSTEM_KINDS = {
    PlaceholderKind.CREATED_YEAR,
    PlaceholderKind.CREATED_MONTH,
    PlaceholderKind.CREATED_DAY,
    PlaceholderKind.MODIFIED_YEAR,
    PlaceholderKind.MODIFIED_MONTH,
    PlaceholderKind.MODIFIED_DAY,
}
LOCATION_KINDS = frozenset({
    PlaceholderKind.COUNTRY,
    PlaceholderKind.STATE,
    PlaceholderKind.COUNTY,
    PlaceholderKind.MUNICIPALITY,
    PlaceholderKind.CITY,
})
_PATH_KINDS = {PlaceholderKind.ORIGINAL_FILENAME, PlaceholderKind.ORIGINAL_FOLDER}


def category_of(kind: PlaceholderKind) -> Category:
    if kind in _EXIF_KINDS:
        return Category.EXIF
    if kind in _FILESYSTEM_KINDS:
        return Category.FILESYSTEM
    if kind in LOCATION_KINDS:
        return Category.LOCATION
    if kind in _PATH_KINDS:
        return Category.PATH
    return Category.NONE


@dataclass(frozen=True)
class AlternativeToken:
    """One alternative of a placeholder group: its raw text and kind."""

    raw: str
    kind: PlaceholderKind

    @property
    def is_literal(self) -> bool:
        return self.kind is PlaceholderKind.LITERAL

    @property
    def category(self) -> Category:
        return category_of(self.kind)


def classify(raw: str) -> AlternativeToken:
    """Map an alternative's raw text to its token.

    Lookup is exact and case-sensitive: `%Year` is unknown.
    """
    if raw.startswith("%"):
        return AlternativeToken(raw, PLACEHOLDERS.get(raw, PlaceholderKind.UNKNOWN))
    return AlternativeToken(raw, PlaceholderKind.LITERAL)


def fallback_label(kind: PlaceholderKind) -> str:
    return f"Unknown {kind.value}"


@dataclass(frozen=True)
class TemplateRequirements:
    """Which per-file providers a template can possibly touch."""

    needs_exif: bool = False
    needs_filesystem_time: bool = False
    needs_location: bool = False

    @classmethod
    def from_tokens(cls, tokens: Iterable[AlternativeToken]) -> "TemplateRequirements":
        categories = {token.category for token in tokens}
        needs_location = Category.LOCATION in categories
        return cls(
            # coordinates for a location lookup come from EXIF
            needs_exif=Category.EXIF in categories or needs_location,
            needs_filesystem_time=Category.FILESYSTEM in categories,
            needs_location=needs_location,
        )
