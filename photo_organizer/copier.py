"""Copier: copy, move or symlink a file to its rendered destination with conflict resolution."""
from __future__ import annotations

from pathlib import Path
from typing import Tuple
import logging
import os
import shutil

from .duplicates import hash_file

STRATEGIES = ("copy", "move", "symlink")


def _same_content(src: Path, dest: Path) -> bool:
    try:
        if dest.is_symlink():
            return dest.resolve() == src.resolve()
        return dest.stat().st_size == src.stat().st_size and hash_file(src) == hash_file(dest)
    except OSError:
        return False


def _free_name(dest: Path) -> Path:
    base = dest.stem
    suf = dest.suffix
    i = 1
    candidate = dest
    while candidate.exists() or candidate.is_symlink():
        candidate = dest.with_name(f"{base}_{i}{suf}")
        i += 1
    return candidate


def organize_file(src, dest, strategy: str = "copy", dry_run: bool = False) -> Tuple[Path, str]:
    """Place `src` at `dest` using `strategy`. Returns (final destination, status).

    Behavior:
    - Create the parent directory of `dest` if needed
    - If `dest` exists with identical content, skip (`skipped_identical`)
    - If `dest` exists but differs, append suffix `_1`, `_2`, ... (`renamed`)
    - Otherwise the status is `copied`, `moved` or `linked`; `dryrun` in dry-run mode
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown strategy {strategy!r}; choose from {', '.join(STRATEGIES)}")
    src = Path(src)
    dest = Path(dest)

    renamed = False
    if dest.exists() or dest.is_symlink():
        if _same_content(src, dest):
            logging.info("Skipping identical file: %s", src)
            return dest, "skipped_identical"
        dest = _free_name(dest)
        renamed = True

    if dry_run:
        logging.info("Dry run: would %s %s -> %s", strategy, src, dest)
        return dest, "dryrun"

    dest.parent.mkdir(parents=True, exist_ok=True)
    if strategy == "copy":
        shutil.copy2(src, dest)
        status = "copied"
    elif strategy == "move":
        shutil.move(str(src), str(dest))
        status = "moved"
    else:
        os.symlink(src.resolve(), dest)
        status = "linked"
    logging.info("%s %s -> %s", status.capitalize(), src, dest)
    return dest, "renamed" if renamed else status
