"""Command line entry point."""
from __future__ import annotations

import logging

import click

from .copier import STRATEGIES
from .errors import ConfigError
from .geocoder import GEOCODERS
from .organizer import Organizer
from .settings import load_settings
from .utils.paths import parse_size

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def configure_logging(verbosity: int, dry_run: bool = False, log_file: str | None = None) -> None:
    """WARNING by default, INFO with -v (or a dry run), DEBUG with -vv."""
    if dry_run and verbosity == 0:
        verbosity = 1
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def _size_option(ctx, param, value):
    try:
        return parse_size(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.command(help="Organize photos into folders rendered from a placeholder template.")
@click.option("--source", help="Source directory or file to organize.")
@click.option("--destination", help="Destination directory for the organized files.")
@click.option("--recursive", is_flag=True, default=None, help="Walk subdirectories of the source.")
@click.option("--extension", "extensions", multiple=True, help="Only keep files with this extension (repeatable).")
@click.option("--exclude-extension", "exclude_extensions", multiple=True,
              help="Skip files with this extension (repeatable).")
@click.option("--include-regex", help="Only keep files whose full path matches this regex.")
@click.option("--exclude-regex", help="Skip files whose full path matches this regex.")
@click.option("--size-greater", callback=_size_option,
              help="Only keep files of at least this size, e.g. 500KB, 2MB.")
@click.option("--size-lower", callback=_size_option, help="Only keep files of at most this size.")
@click.option("--dry-run", is_flag=True, default=None, help="Show what would be done without touching any file.")
@click.option("--dry-run-number-of-files", type=int, help="Number of files shown by a dry run (default 10).")
@click.option("-v", "--verbose", "verbosity", count=True, help="Increase verbosity (-v, -vv).")
@click.option("--log", "log_file", help="Also write the log to this file.")
@click.option("--folder-format", help="Folder template, e.g. '%year/{%city|%camera_brand|To sort}'.")
@click.option("--filename-format", help="File name template, e.g. '%year%month%day_%original_filename'.")
@click.option("--gps-optimization", is_flag=True, default=None,
              help="Round coordinates before geocoding (about 1 km) so nearby photos share one lookup.")
@click.option("--gps-precision", type=click.IntRange(min=0), help="Decimals kept by --gps-optimization (default 2).")
@click.option("--strategy", type=click.Choice(STRATEGIES), help="How files are placed (default copy).")
@click.option("--drop-duplicates", is_flag=True, default=None, help="Skip files whose content was already seen.")
@click.option("--reverse-geocoding", type=click.Choice(GEOCODERS), help="Reverse geocoding provider.")
@click.option("--nominatim-email", help="E-mail sent to Nominatim, required by its usage policy.")
@click.option("--geocache", help="JSON file keeping geocoding results between runs (needs --gps-optimization).")
@click.option("--skip-unresolved", is_flag=True, default=None,
              help="Skip files where a placeholder group has no value instead of writing 'Unknown ...'.")
@click.option("--config", "config_file", help="JSON settings file.")
def main(verbosity, log_file, config_file, **options):
    configure_logging(verbosity, bool(options.get("dry_run")), log_file)
    logging.debug("Get configuration")
    try:
        settings = load_settings(config_file).merged(options)
        if settings.log_file and not log_file:
            configure_logging(verbosity, settings.dry_run, settings.log_file)
        if not settings.source or not settings.destination:
            raise ConfigError("Both --source and --destination are required.")
        organizer = Organizer.from_settings(settings)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    logging.debug("Template %r, strategy %s", organizer.formatter.template, settings.strategy)
    try:
        summary = organizer.run()
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(
        f"Done. {summary.processed} file(s) processed: {summary.organized} organized, "
        f"{summary.duplicates} duplicate(s), {summary.skipped} skipped, {summary.failed} failed."
    )
    if summary.failed:
        raise SystemExit(1)
