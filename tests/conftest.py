"""Shared test fixtures for Photo Organizer."""

from pathlib import Path

import piexif
import pytest
from PIL import Image

from photo_organizer.errors import GeocodingError
from photo_organizer.geocoder import Geocoder, LocationInfo


def _to_dms(value: float):
    value = abs(value)
    deg = int(value)
    minutes = (value - deg) * 60
    minute = int(minutes)
    sec = round((minutes - minute) * 60 * 10000)
    return ((deg, 1), (minute, 1), (sec, 10000))


def write_jpeg(path: Path, date="2023:03:04 10:20:30", make="rusttest", model="RT-1",
               gps=None, size=(8, 6), with_exif=True) -> Path:
    """Write a small JPEG carrying the given EXIF fields."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, "white")
    if not with_exif:
        img.save(path, "JPEG")
        return path
    zeroth, exif, gps_ifd = {}, {}, {}
    if make:
        zeroth[piexif.ImageIFD.Make] = make.encode()
    if model:
        zeroth[piexif.ImageIFD.Model] = model.encode()
    if date:
        exif[piexif.ExifIFD.DateTimeOriginal] = date.encode()
    if gps:
        lat, lon = gps
        gps_ifd[piexif.GPSIFD.GPSLatitudeRef] = b"N" if lat >= 0 else b"S"
        gps_ifd[piexif.GPSIFD.GPSLatitude] = _to_dms(lat)
        gps_ifd[piexif.GPSIFD.GPSLongitudeRef] = b"E" if lon >= 0 else b"W"
        gps_ifd[piexif.GPSIFD.GPSLongitude] = _to_dms(lon)
    exif_bytes = piexif.dump({"0th": zeroth, "Exif": exif, "GPS": gps_ifd, "1st": {}, "thumbnail": None})
    img.save(path, "JPEG", exif=exif_bytes)
    return path


class FakeClock:
    """Monotonic clock whose sleep() just advances time."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeGeocoder(Geocoder):
    name = "fake"
    min_interval = 1.0

    def __init__(self, clock=None, location=None, fail=False, duration=0.0):
        self.clock = clock
        self.location = location or LocationInfo(country="France", state="Ile-de-France", city="Paris")
        self.fail = fail
        self.duration = duration
        self.calls = []

    def reverse(self, lat, lon):
        self.calls.append((lat, lon, self.clock() if self.clock else None))
        if self.clock is not None and self.duration:
            self.clock.now += self.duration
        if self.fail:
            raise GeocodingError(f"boom at ({lat}, {lon})")
        return self.location


@pytest.fixture
def jpeg_factory(tmp_path):
    def factory(name="photo.jpg", **kwargs):
        return write_jpeg(tmp_path / name, **kwargs)
    return factory


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_geocoder(clock):
    return FakeGeocoder(clock=clock)
