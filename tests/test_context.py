"""Tests for the per-file context providers."""

import os
from datetime import datetime

import pytest

from photo_organizer.context import FileContext, FileTimes
from photo_organizer.errors import (
    CreationTimeUnavailable,
    ExifReadError,
    FileAccessError,
    GeocodingError,
    MissingCoordinatesError,
)
from photo_organizer.geocache import LocationCache
from photo_organizer.template import TemplateRequirements

ALL = TemplateRequirements(needs_exif=True, needs_filesystem_time=True, needs_location=True)


class TestFileTimes:
    def test_modified(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("x")
        stamp = datetime(2021, 6, 7, 8, 9, 10).timestamp()
        os.utime(path, (stamp, stamp))
        assert FileTimes(path).modified() == datetime(2021, 6, 7, 8, 9, 10)

    def test_created_is_recoverable_error_without_birth_time(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("x")
        times = FileTimes(path)
        if hasattr(os.stat(path), "st_birthtime") or os.name == "nt":
            assert isinstance(times.created(), datetime)
        else:
            with pytest.raises(CreationTimeUnavailable):
                times.created()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileAccessError):
            FileTimes(tmp_path / "missing")


class CountingCache(LocationCache):
    def __init__(self, geocoder, **kwargs):
        super().__init__(geocoder, **kwargs)
        self.resolved = []

    def resolve(self, lat, lon):
        self.resolved.append((lat, lon))
        return super().resolve(lat, lon)


class TestFileContext:
    def test_exif_is_decoded_once(self, jpeg_factory):
        path = jpeg_factory()
        ctx = FileContext(path, ALL)
        assert ctx.exif() is ctx.exif()

    def test_construction_failure_is_remembered(self, jpeg_factory):
        path = jpeg_factory(with_exif=False)
        ctx = FileContext(path, ALL)
        with pytest.raises(ExifReadError) as first:
            ctx.exif()
        with pytest.raises(ExifReadError) as second:
            ctx.exif()
        assert first.value is second.value
        assert ctx.built() == {"exif": False}

    def test_exif_failure_does_not_break_file_times(self, jpeg_factory):
        ctx = FileContext(jpeg_factory(with_exif=False), ALL)
        with pytest.raises(ExifReadError):
            ctx.exif()
        assert ctx.file_times().modified().year >= 2000

    def test_disabled_provider(self, jpeg_factory):
        ctx = FileContext(jpeg_factory(), TemplateRequirements(needs_exif=True))
        with pytest.raises(RuntimeError):
            ctx.file_times()

    def test_location_without_coordinates(self, jpeg_factory, fake_geocoder, clock):
        cache = CountingCache(fake_geocoder, clock=clock, sleep=clock.sleep)
        ctx = FileContext(jpeg_factory(gps=None), ALL, cache)
        with pytest.raises(MissingCoordinatesError):
            ctx.location()
        assert cache.resolved == []

    def test_location_without_geocoder(self, jpeg_factory):
        ctx = FileContext(jpeg_factory(gps=(1.0, 2.0)), ALL, None)
        with pytest.raises(GeocodingError):
            ctx.location()

    def test_location_is_looked_up_once_per_file(self, jpeg_factory, fake_geocoder, clock):
        cache = CountingCache(fake_geocoder, precision=None, clock=clock, sleep=clock.sleep)
        ctx = FileContext(jpeg_factory(gps=(48.857, 2.295)), ALL, cache)
        assert ctx.location().city == "Paris"
        assert ctx.location().country == "France"
        assert len(cache.resolved) == 1
        assert len(fake_geocoder.calls) == 1
