"""Batch loop: scan the source, drop duplicates, render each destination and place the file."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional
import logging

from .copier import organize_file
from .duplicates import DuplicateFinder
from .errors import PhotoOrganizerError
from .formatter import PathFormatter
from .geocache import LocationCache
from .geocoder import build_geocoder
from .scanner import ScanFilter, scan_images
from .settings import Settings
from .utils.paths import user_path


@dataclass
class FileOutcome:
    source: Path
    destination: Optional[Path]
    status: str
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "source": str(self.source),
            "destination": str(self.destination) if self.destination else None,
            "status": self.status,
            "error": self.error,
        }


@dataclass
class BatchSummary:
    processed: int = 0
    organized: int = 0
    duplicates: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    outcomes: List[FileOutcome] = field(default_factory=list)

    def record(self, outcome: FileOutcome) -> None:
        self.processed += 1
        self.outcomes.append(outcome)
        if outcome.status == "duplicate":
            self.duplicates += 1
        elif outcome.status == "skipped":
            self.skipped += 1
        elif outcome.status == "failed":
            self.failed += 1
        else:
            self.organized += 1
        if outcome.error:
            self.errors.append(f"{outcome.source}: {outcome.error}")


ProgressCallback = Callable[[int, FileOutcome], None]


def build_location_cache(settings: Settings) -> Optional[LocationCache]:
    geocoder = build_geocoder(settings.reverse_geocoding, settings.nominatim_email)
    if geocoder is None:
        return None
    return LocationCache(
        geocoder,
        precision=settings.geocode_precision,
        cache_path=user_path(settings.geocache),
    )


def build_scan_filter(settings: Settings) -> ScanFilter:
    return ScanFilter.build(
        extensions=settings.extensions,
        exclude_extensions=settings.exclude_extensions,
        include_regex=settings.include_regex,
        exclude_regex=settings.exclude_regex,
        size_greater=settings.size_greater,
        size_lower=settings.size_lower,
    )


class Organizer:
    """Runs one batch. A file that fails is logged and skipped; the batch goes on."""

    def __init__(self, settings: Settings, formatter: PathFormatter, scan_filter: Optional[ScanFilter] = None):
        self.settings = settings
        self.formatter = formatter
        self.scan_filter = scan_filter or build_scan_filter(settings)
        self.destination = user_path(settings.destination) or Path(".")
        self._duplicates = DuplicateFinder() if settings.drop_duplicates else None

    @classmethod
    def from_settings(cls, settings: Settings, locations: Optional[LocationCache] = None) -> "Organizer":
        """Build the formatter (and, unless given, the location cache) for `settings`."""
        settings.validate()
        template = settings.full_template()
        if locations is None:
            locations = build_location_cache(settings)
        formatter = PathFormatter(
            template,
            locations=locations,
            location_aliases=settings.location_aliases,
            skip_unresolved=settings.skip_unresolved,
        )
        return cls(settings, formatter)

    def files(self) -> List[Path]:
        source = user_path(self.settings.source)
        if source is None:
            raise PhotoOrganizerError("No source given")
        return list(scan_images(source, recursive=self.settings.recursive, scan_filter=self.scan_filter))

    def process(self, path: Path) -> FileOutcome:
        if self._duplicates is not None:
            try:
                if self._duplicates.is_duplicate(path):
                    logging.info("Found duplicate %s", path)
                    return FileOutcome(path, None, "duplicate")
            except OSError as exc:
                logging.error("Cannot hash %s: %s", path, exc)
                return FileOutcome(path, None, "failed", str(exc))

        try:
            target = self.destination / self.formatter.format(path)
        except PhotoOrganizerError as exc:
            logging.error("Skipping %s: %s", path, exc)
            return FileOutcome(path, None, "skipped", str(exc))
        except Exception as exc:
            logging.exception("Cannot render a destination for %s", path)
            return FileOutcome(path, None, "failed", str(exc))
        logging.debug("Formatted path for %s: %s", path, target)

        try:
            final, status = organize_file(path, target, self.settings.strategy, dry_run=self.settings.dry_run)
        except OSError as exc:
            logging.error("Cannot %s %s -> %s: %s", self.settings.strategy, path, target, exc)
            return FileOutcome(path, target, "failed", str(exc))
        if status == "skipped_identical":
            return FileOutcome(path, final, "duplicate")
        return FileOutcome(path, final, status)

    def run(self, files: Optional[Iterable[Path]] = None,
            progress_cb: Optional[ProgressCallback] = None) -> BatchSummary:
        summary = BatchSummary()
        limit = self.settings.dry_run_number_of_files if self.settings.dry_run else None
        for path in (self.files() if files is None else files):
            if limit is not None and summary.processed >= limit:
                logging.info("Dry run limit of %d file(s) reached", limit)
                break
            outcome = self.process(path)
            summary.record(outcome)
            if self.settings.dry_run and outcome.destination is not None:
                logging.info("%s -> %s", path, outcome.destination)
            if progress_cb:
                progress_cb(summary.processed, outcome)
        locations = self.formatter.locations
        if locations is not None:
            logging.info("Location lookups: %d cache hit(s), %d geocoding call(s)", locations.hits, locations.calls)
        return summary
