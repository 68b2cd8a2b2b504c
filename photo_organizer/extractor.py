"""Extractor: read EXIF metadata (capture date, camera, dimensions, GPS) from image files.

Pillow + piexif is tried first; exifread is used for containers where Pillow
does not expose the raw EXIF block. Each accessor fails on its own with
`MissingFieldError`, so a file without GPS can still render its date.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import logging
import struct

import exifread
import piexif
import pillow_heif
from PIL import Image

from .errors import ExifReadError, MissingFieldError

pillow_heif.register_heif_opener()

# normalised field names shared by both decoders
DATE_TIME_ORIGINAL = "DateTimeOriginal"
DATE_TIME = "DateTime"
MAKE = "Make"
MODEL = "Model"
PIXEL_X = "PixelXDimension"
PIXEL_Y = "PixelYDimension"
IMAGE_WIDTH = "ImageWidth"
IMAGE_LENGTH = "ImageLength"
GPS_LATITUDE = "GPSLatitude"
GPS_LATITUDE_REF = "GPSLatitudeRef"
GPS_LONGITUDE = "GPSLongitude"
GPS_LONGITUDE_REF = "GPSLongitudeRef"

_PIEXIF_FIELDS = (
    ("Exif", piexif.ExifIFD.DateTimeOriginal, DATE_TIME_ORIGINAL),
    ("0th", piexif.ImageIFD.DateTime, DATE_TIME),
    ("0th", piexif.ImageIFD.Make, MAKE),
    ("0th", piexif.ImageIFD.Model, MODEL),
    ("Exif", piexif.ExifIFD.PixelXDimension, PIXEL_X),
    ("Exif", piexif.ExifIFD.PixelYDimension, PIXEL_Y),
    ("0th", piexif.ImageIFD.ImageWidth, IMAGE_WIDTH),
    ("0th", piexif.ImageIFD.ImageLength, IMAGE_LENGTH),
    ("GPS", piexif.GPSIFD.GPSLatitude, GPS_LATITUDE),
    ("GPS", piexif.GPSIFD.GPSLatitudeRef, GPS_LATITUDE_REF),
    ("GPS", piexif.GPSIFD.GPSLongitude, GPS_LONGITUDE),
    ("GPS", piexif.GPSIFD.GPSLongitudeRef, GPS_LONGITUDE_REF),
)

_EXIFREAD_FIELDS = {
    "EXIF DateTimeOriginal": DATE_TIME_ORIGINAL,
    "Image DateTime": DATE_TIME,
    "Image Make": MAKE,
    "Image Model": MODEL,
    "EXIF ExifImageWidth": PIXEL_X,
    "EXIF ExifImageLength": PIXEL_Y,
    "Image ImageWidth": IMAGE_WIDTH,
    "Image ImageLength": IMAGE_LENGTH,
    "GPS GPSLatitude": GPS_LATITUDE,
    "GPS GPSLatitudeRef": GPS_LATITUDE_REF,
    "GPS GPSLongitude": GPS_LONGITUDE,
    "GPS GPSLongitudeRef": GPS_LONGITUDE_REF,
}

_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


def _clean_text(value) -> str:
    if isinstance(value, bytes):
        value = value.decode(errors="ignore")
    return str(value).replace("\x00", "").strip()


def _rational_to_float(value) -> float:
    # piexif gives (num, den) tuples, exifread gives Fraction-like ratios
    if isinstance(value, tuple):
        num, den = value
        return float(num) / float(den) if den else float(num)
    return float(value)


def dms_to_decimal(dms, ref: Optional[str] = None) -> float:
    """Convert a degrees/minutes/seconds triple to signed decimal degrees."""
    if dms is None or len(dms) < 3:
        raise ValueError(f"expected three GPS components, got {dms!r}")
    deg = _rational_to_float(dms[0])
    minute = _rational_to_float(dms[1])
    sec = _rational_to_float(dms[2])
    dec = deg + (minute / 60.0) + (sec / 3600.0)
    if ref and ref.upper().startswith(("S", "W")):
        dec = -dec
    return dec


def parse_exif_datetime(value: str) -> datetime:
    """Parse 'YYYY:MM:DD HH:MM:SS', falling back to ISO 8601."""
    try:
        return datetime.strptime(value, _DATE_FORMAT)
    except ValueError:
        return datetime.fromisoformat(value)


def _read_with_pillow(path: Path) -> Tuple[Dict[str, Any], Optional[Tuple[int, int]]]:
    with Image.open(path) as img:
        size = img.size
        exif_bytes = img.info.get("exif")
        if not exif_bytes:
            return {}, size
        exif = piexif.load(exif_bytes)
    fields = {}
    for ifd, tag, name in _PIEXIF_FIELDS:
        value = exif.get(ifd, {}).get(tag)
        if value is not None:
            fields[name] = value
    return fields, size


def _read_with_exifread(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as fh:
        tags = exifread.process_file(fh, details=False)
    fields = {}
    for tag_name, name in _EXIFREAD_FIELDS.items():
        tag = tags.get(tag_name)
        if tag is None:
            continue
        values = tag.values
        if isinstance(values, (list, tuple)) and name not in (GPS_LATITUDE, GPS_LONGITUDE):
            values = values[0] if values else None
        if values is not None:
            fields[name] = values
    return fields


class ExifData:
    """Decoded EXIF fields of one file, decoded once and queried many times."""

    def __init__(self, path: Path, fields: Dict[str, Any], size: Optional[Tuple[int, int]] = None):
        self.path = Path(path)
        self._fields = fields
        self._size = size

    @classmethod
    def open(cls, path) -> "ExifData":
        """Decode `path`; raises `ExifReadError` if nothing can be read."""
        path = Path(path)
        fields: Dict[str, Any] = {}
        size = None
        pillow_error = None
        try:
            fields, size = _read_with_pillow(path)
        except (OSError, ValueError, struct.error, piexif.InvalidImageDataError,
                Image.DecompressionBombError) as exc:
            pillow_error = exc
            logging.debug("Pillow could not read %s: %s", path, exc)

        if not fields:
            try:
                fields = _read_with_exifread(path)
            except OSError as exc:
                raise ExifReadError(path, str(exc)) from exc
            except Exception as exc:
                # exifread raises assorted errors on corrupt containers
                logging.debug("exifread failed on %s: %s", path, exc)

        if not fields:
            reason = str(pillow_error) if pillow_error else "no EXIF data"
            raise ExifReadError(path, reason)
        return cls(path, fields, size)

    def get(self, name: str):
        value = self._fields.get(name)
        if value is None:
            raise MissingFieldError(name)
        return value

    def _text(self, name: str) -> str:
        value = _clean_text(self.get(name))
        if not value:
            raise MissingFieldError(name, "empty value")
        return value

    def capture_date(self) -> datetime:
        for name in (DATE_TIME_ORIGINAL, DATE_TIME):
            if name not in self._fields:
                continue
            raw = self._text(name)
            try:
                return parse_exif_datetime(raw)
            except ValueError as exc:
                raise MissingFieldError(name, f"malformed date {raw!r}") from exc
        raise MissingFieldError(DATE_TIME_ORIGINAL)

    def _dimension(self, names, index: int) -> int:
        for name in names:
            value = self._fields.get(name)
            if value is not None:
                try:
                    return int(value)
                except (TypeError, ValueError) as exc:
                    raise MissingFieldError(name, f"malformed value {value!r}") from exc
        if self._size:
            return int(self._size[index])
        raise MissingFieldError(names[0])

    def width(self) -> int:
        return self._dimension((PIXEL_X, IMAGE_WIDTH), 0)

    def height(self) -> int:
        return self._dimension((PIXEL_Y, IMAGE_LENGTH), 1)

    def camera_model(self) -> str:
        return self._text(MODEL)

    def camera_brand(self) -> str:
        return self._text(MAKE)

    def _coordinate(self, name: str, ref_name: str) -> float:
        dms = self.get(name)
        ref = _clean_text(self._fields.get(ref_name) or "")
        try:
            return dms_to_decimal(dms, ref)
        except (TypeError, ValueError, ZeroDivisionError) as exc:
            raise MissingFieldError(name, str(exc)) from exc

    def latitude(self) -> float:
        return self._coordinate(GPS_LATITUDE, GPS_LATITUDE_REF)

    def longitude(self) -> float:
        return self._coordinate(GPS_LONGITUDE, GPS_LONGITUDE_REF)
