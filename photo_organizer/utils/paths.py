"""Helpers for user-supplied paths and sizes."""
from __future__ import annotations

from pathlib import Path
import os
import re

_SIZE_PATTERN = re.compile(r"^\s*(?P<number>[0-9]+)\s*(?P<unit>[KMGTP]?)[Bo]?\s*$", re.IGNORECASE)
_MULTIPLIERS = {"": 1, "K": 1024, "M": 1024 ** 2, "G": 1024 ** 3, "T": 1024 ** 4, "P": 1024 ** 5}


def normalize_user_path(value: str | None) -> str | None:
    """Expand `~` and environment variables, trim whitespace."""
    if not value:
        return value
    value = os.path.expandvars(os.path.expanduser(value.strip()))
    return value or None


def user_path(value: str | None) -> Path | None:
    normalized = normalize_user_path(value)
    return Path(normalized) if normalized else None


def parse_size(value: str | int | None) -> int | None:
    """Convert '10MB', '512K', '2 GB' or a plain byte count into bytes (1024-based)."""
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    match = _SIZE_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid size {value!r}; use a number followed by KB, MB, GB, TB or PB")
    return int(match.group("number")) * _MULTIPLIERS[match.group("unit").upper()]
