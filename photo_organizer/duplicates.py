"""Duplicate detection by file size, then SHA-256 of the content."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Set
import hashlib


def hash_file(path: Path, block_size: int = 65536) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(block_size), b""):
            h.update(chunk)
    return h.hexdigest()


class DuplicateFinder:
    """Remembers every file it has seen; reports later copies of the same content.

    Hashes are bucketed by size. Empty files are never duplicates.
    """

    def __init__(self):
        self._seen: Dict[int, Set[str]] = {}

    def is_duplicate(self, path) -> bool:
        path = Path(path)
        if path.is_dir():
            return False
        size = path.stat().st_size
        if size == 0:
            return False
        digest = hash_file(path)
        hashes = self._seen.setdefault(size, set())
        if digest in hashes:
            return True
        hashes.add(digest)
        return False
