"""Scanner: walk a source directory and yield the files to organize."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional, Pattern
import logging
import re


def _normalize_extensions(extensions: Optional[Iterable[str]]) -> frozenset:
    return frozenset(e.lower().lstrip(".") for e in (extensions or []) if e)


@dataclass
class ScanFilter:
    """Which files of the source tree are kept.

    Extensions are compared case-insensitively and without the leading dot.
    Regexes are searched in the full path. `size_lower` / `size_greater` are
    byte bounds: files larger than `size_lower` or smaller than
    `size_greater` are dropped.
    """

    extensions: frozenset = field(default_factory=frozenset)
    exclude_extensions: frozenset = field(default_factory=frozenset)
    include_regex: Optional[Pattern] = None
    exclude_regex: Optional[Pattern] = None
    size_greater: Optional[int] = None
    size_lower: Optional[int] = None

    @classmethod
    def build(cls, extensions=None, exclude_extensions=None, include_regex=None,
              exclude_regex=None, size_greater=None, size_lower=None) -> "ScanFilter":
        return cls(
            extensions=_normalize_extensions(extensions),
            exclude_extensions=_normalize_extensions(exclude_extensions),
            include_regex=re.compile(include_regex) if isinstance(include_regex, str) else include_regex,
            exclude_regex=re.compile(exclude_regex) if isinstance(exclude_regex, str) else exclude_regex,
            size_greater=size_greater,
            size_lower=size_lower,
        )

    def allows_extension(self, path: Path) -> bool:
        ext = path.suffix.lower().lstrip(".")
        if not ext:
            return False
        if self.extensions and ext not in self.extensions:
            logging.debug("File extension %r of %s is not in the allowed list", ext, path)
            return False
        if ext in self.exclude_extensions:
            logging.debug("File extension %r of %s is excluded", ext, path)
            return False
        return True

    def allows_name(self, path: Path) -> bool:
        text = str(path)
        if self.include_regex is not None and not self.include_regex.search(text):
            return False
        if self.exclude_regex is not None and self.exclude_regex.search(text):
            return False
        return True

    def allows_size(self, path: Path) -> bool:
        if self.size_lower is None and self.size_greater is None:
            return True
        size = path.stat().st_size
        if self.size_lower is not None and size > self.size_lower:
            logging.debug("%s is larger than %d bytes", path, self.size_lower)
            return False
        if self.size_greater is not None and size < self.size_greater:
            logging.debug("%s is smaller than %d bytes", path, self.size_greater)
            return False
        return True

    def accepts(self, path: Path) -> bool:
        if not self.allows_name(path) or not self.allows_extension(path):
            return False
        try:
            return self.allows_size(path)
        except OSError as exc:
            logging.warning("Unable to check file size of %s: %s", path, exc)
            return False


def scan_images(source, recursive: bool = True, scan_filter: Optional[ScanFilter] = None) -> Iterator[Path]:
    """Yield Path objects for the files in `source` accepted by `scan_filter`.

    Args:
        source: directory to scan, or a single file
        recursive: whether to walk subdirectories
        scan_filter: optional filter; everything with an extension is kept by default
    """
    p = Path(source)
    if not p.exists():
        raise FileNotFoundError(f"Source path not found: {source}")

    scan_filter = scan_filter or ScanFilter()
    if p.is_file():
        candidates = [p]
    elif recursive:
        candidates = sorted(p.rglob("*"))
    else:
        candidates = sorted(p.iterdir())

    for fp in candidates:
        if not fp.is_file():
            continue
        if scan_filter.accepts(fp):
            yield fp
