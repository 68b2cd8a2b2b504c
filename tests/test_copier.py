"""Tests for placing files and detecting duplicates."""

import os

import pytest

from photo_organizer.copier import organize_file
from photo_organizer.duplicates import DuplicateFinder


@pytest.fixture
def src(tmp_path):
    path = tmp_path / "in" / "a.jpg"
    path.parent.mkdir()
    path.write_bytes(b"image data")
    return path


class TestOrganizeFile:
    def test_copy_creates_parents(self, src, tmp_path):
        dest = tmp_path / "out" / "2023" / "a.jpg"
        assert organize_file(src, dest) == (dest, "copied")
        assert dest.read_bytes() == b"image data"
        assert src.exists()

    def test_move(self, src, tmp_path):
        dest = tmp_path / "out" / "a.jpg"
        assert organize_file(src, dest, strategy="move") == (dest, "moved")
        assert not src.exists()

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_symlink(self, src, tmp_path):
        dest = tmp_path / "out" / "a.jpg"
        assert organize_file(src, dest, strategy="symlink") == (dest, "linked")
        assert dest.is_symlink()
        assert dest.resolve() == src.resolve()

    def test_identical_destination_is_skipped(self, src, tmp_path):
        dest = tmp_path / "out" / "a.jpg"
        dest.parent.mkdir()
        dest.write_bytes(b"image data")
        assert organize_file(src, dest) == (dest, "skipped_identical")

    def test_conflict_gets_a_suffix(self, src, tmp_path):
        dest = tmp_path / "out" / "a.jpg"
        dest.parent.mkdir()
        dest.write_bytes(b"other")
        (tmp_path / "out" / "a_1.jpg").write_bytes(b"other too")
        final, status = organize_file(src, dest)
        assert status == "renamed"
        assert final.name == "a_2.jpg"
        assert final.read_bytes() == b"image data"

    def test_dry_run_touches_nothing(self, src, tmp_path):
        dest = tmp_path / "out" / "a.jpg"
        assert organize_file(src, dest, dry_run=True) == (dest, "dryrun")
        assert not dest.parent.exists()

    def test_unknown_strategy(self, src, tmp_path):
        with pytest.raises(ValueError):
            organize_file(src, tmp_path / "x.jpg", strategy="teleport")


class TestDuplicateFinder:
    def test_second_copy_is_duplicate(self, tmp_path):
        a = tmp_path / "a.jpg"
        b = tmp_path / "b.jpg"
        c = tmp_path / "c.jpg"
        a.write_bytes(b"same")
        b.write_bytes(b"same")
        c.write_bytes(b"diff")
        finder = DuplicateFinder()
        assert [finder.is_duplicate(p) for p in (a, b, c)] == [False, True, False]

    def test_empty_files_are_never_duplicates(self, tmp_path):
        a = tmp_path / "a"
        b = tmp_path / "b"
        a.write_bytes(b"")
        b.write_bytes(b"")
        finder = DuplicateFinder()
        assert not finder.is_duplicate(a)
        assert not finder.is_duplicate(b)
