"""Formatter: render a destination path for one file from a parsed template.

The template is parsed once. For every file a fresh `FileContext` is built;
each placeholder group is resolved once by trying its alternatives left to
right and the output is reassembled span by span, so text that only looks
like a group is never replaced by accident.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Union
import logging

from .context import FileContext
from .errors import ConfigError, PlaceholderError, UnknownPlaceholderError, UnresolvedPlaceholderError
from .geocache import LocationCache
from .template.parser import ParsedTemplate, PlaceholderGroup, parse_template
from .template.placeholders import LOCATION_KINDS, AlternativeToken, PlaceholderKind, fallback_label

ValueResolver = Callable[[FileContext], str]


def _capture(fmt: str) -> ValueResolver:
    return lambda ctx: ctx.exif().capture_date().strftime(fmt)


def _created(fmt: str) -> ValueResolver:
    return lambda ctx: ctx.file_times().created().strftime(fmt)


def _modified(fmt: str) -> ValueResolver:
    return lambda ctx: ctx.file_times().modified().strftime(fmt)


def _location(field: str) -> ValueResolver:
    def resolve(ctx: FileContext) -> str:
        value = getattr(ctx.location(), field)
        if not value:
            raise PlaceholderError(f"No {field} in the location of {ctx.path}")
        return value
    return resolve


def _original_filename(ctx: FileContext) -> str:
    name = ctx.path.name
    if not name:
        raise PlaceholderError(f"{ctx.path} has no file name")
    return name


def _original_folder(ctx: FileContext) -> str:
    folder = ctx.path.parent.name
    if not folder:
        raise PlaceholderError(f"{ctx.path} has no parent folder")
    return folder


RESOLVERS: Dict[PlaceholderKind, ValueResolver] = {
    PlaceholderKind.YEAR: _capture("%Y"),
    PlaceholderKind.MONTH: _capture("%m"),
    PlaceholderKind.DAY: _capture("%d"),
    PlaceholderKind.CREATED_YEAR: _created("%Y"),
    PlaceholderKind.CREATED_MONTH: _created("%m"),
    PlaceholderKind.CREATED_DAY: _created("%d"),
    PlaceholderKind.MODIFIED_YEAR: _modified("%Y"),
    PlaceholderKind.MODIFIED_MONTH: _modified("%m"),
    PlaceholderKind.MODIFIED_DAY: _modified("%d"),
    PlaceholderKind.WIDTH: lambda ctx: str(ctx.exif().width()),
    PlaceholderKind.HEIGHT: lambda ctx: str(ctx.exif().height()),
    PlaceholderKind.CAMERA_MODEL: lambda ctx: ctx.exif().camera_model(),
    PlaceholderKind.CAMERA_BRAND: lambda ctx: ctx.exif().camera_brand(),
    PlaceholderKind.COUNTRY: _location("country"),
    PlaceholderKind.STATE: _location("state"),
    PlaceholderKind.COUNTY: _location("county"),
    PlaceholderKind.MUNICIPALITY: _location("municipality"),
    PlaceholderKind.CITY: _location("city"),
    PlaceholderKind.ORIGINAL_FILENAME: _original_filename,
    PlaceholderKind.ORIGINAL_FOLDER: _original_folder,
}


class PathFormatter:
    """Render paths for many files from one template.

    Args:
        template: template string or an already parsed template
        locations: location cache shared by every file of the run; required
            when the template uses a location placeholder
        location_aliases: case-insensitive renames applied to location names
        skip_unresolved: raise `UnresolvedPlaceholderError` instead of
            rendering an "Unknown ..." label
    """

    def __init__(self, template: Union[str, ParsedTemplate], locations: Optional[LocationCache] = None,
                 location_aliases: Optional[Mapping[str, str]] = None, skip_unresolved: bool = False):
        self.parsed = template if isinstance(template, ParsedTemplate) else parse_template(template)
        self.requirements = self.parsed.requirements
        if self.requirements.needs_location and locations is None:
            raise ConfigError("Location placeholder found but no reverse geocoding provider is set")
        self.locations = locations if self.requirements.needs_location else None
        self.location_aliases = {k.strip().lower(): v for k, v in (location_aliases or {}).items()}
        self.skip_unresolved = skip_unresolved
        logging.debug("Template %r needs %s", self.parsed.template, self.requirements)

    @property
    def template(self) -> str:
        return self.parsed.template

    def _resolve_token(self, token: AlternativeToken, ctx: FileContext) -> str:
        value = RESOLVERS[token.kind](ctx)
        if token.kind in LOCATION_KINDS:
            value = self.location_aliases.get(value.lower(), value)
        return value

    def resolve_group(self, group: PlaceholderGroup, ctx: FileContext) -> str:
        failures: List[PlaceholderError] = []
        last_failed: Optional[PlaceholderKind] = None
        last_unknown: Optional[str] = None

        for token in group.alternatives:
            if token.is_literal:
                return token.raw
            if token.kind is PlaceholderKind.UNKNOWN:
                last_unknown = token.raw
                failures.append(UnknownPlaceholderError(f"Unregistered placeholder {token.raw}"))
                continue
            try:
                return self._resolve_token(token, ctx)
            except PlaceholderError as exc:
                failures.append(exc)
                last_failed = token.kind

        if self.skip_unresolved:
            raise UnresolvedPlaceholderError(ctx.path, group.raw_text, failures)
        if last_failed is None:
            value = last_unknown or ""
        else:
            value = fallback_label(last_failed)
        logging.warning("Rendering %r as %r for %s: %s", group.raw_text, value, ctx.path,
                        "; ".join(str(f) for f in failures))
        return value

    def render(self, file_path) -> str:
        ctx = FileContext(file_path, self.requirements, self.locations)
        values = {group.raw_text: self.resolve_group(group, ctx) for group in self.parsed.unique_groups()}
        return "".join(
            values[span.raw_text] if isinstance(span, PlaceholderGroup) else span.raw_text
            for span in self.parsed.spans
        )

    def format(self, file_path) -> Path:
        return Path(self.render(file_path))


def format_path(template: str, file_path, locations: Optional[LocationCache] = None) -> Path:
    """Render `template` for a single file."""
    return PathFormatter(template, locations=locations).format(file_path)
