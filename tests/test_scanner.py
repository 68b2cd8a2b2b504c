"""Tests for source scanning and filtering."""

import pytest

from photo_organizer.scanner import ScanFilter, scan_images
from photo_organizer.utils.paths import normalize_user_path, parse_size


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a.jpg").write_bytes(b"x" * 10)
    (tmp_path / "b.PNG").write_bytes(b"x" * 2000)
    (tmp_path / "notes").write_text("no extension")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.jpg").write_bytes(b"x" * 100)
    (sub / "skip_me.jpg").write_bytes(b"x" * 100)
    return tmp_path


def names(paths):
    return [p.name for p in paths]


class TestScanImages:
    def test_recursive_is_sorted(self, tree):
        assert names(scan_images(tree)) == ["a.jpg", "b.PNG", "c.jpg", "skip_me.jpg"]

    def test_non_recursive(self, tree):
        assert names(scan_images(tree, recursive=False)) == ["a.jpg", "b.PNG"]

    def test_single_file(self, tree):
        assert names(scan_images(tree / "a.jpg")) == ["a.jpg"]

    def test_missing_source(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(scan_images(tmp_path / "missing"))


class TestScanFilter:
    def test_extensions_are_case_insensitive(self, tree):
        found = scan_images(tree, scan_filter=ScanFilter.build(extensions=[".png"]))
        assert names(found) == ["b.PNG"]

    def test_exclude_extensions(self, tree):
        found = scan_images(tree, scan_filter=ScanFilter.build(exclude_extensions=["JPG"]))
        assert names(found) == ["b.PNG"]

    def test_regexes(self, tree):
        found = scan_images(tree, scan_filter=ScanFilter.build(include_regex=r"\.jpg$", exclude_regex="skip"))
        assert names(found) == ["a.jpg", "c.jpg"]

    def test_size_bounds(self, tree):
        found = scan_images(tree, scan_filter=ScanFilter.build(size_greater=50, size_lower=1000))
        assert names(found) == ["c.jpg", "skip_me.jpg"]


class TestPathHelpers:
    @pytest.mark.parametrize("text,expected", [
        ("10", 10),
        ("512K", 512 * 1024),
        ("10MB", 10 * 1024 ** 2),
        ("2 gb", 2 * 1024 ** 3),
        ("", None),
        (None, None),
    ])
    def test_parse_size(self, text, expected):
        assert parse_size(text) == expected

    def test_parse_size_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_size("ten megabytes")

    def test_normalize_user_path(self, monkeypatch):
        monkeypatch.setenv("PHOTO_ROOT", "/data/photos")
        assert normalize_user_path(" $PHOTO_ROOT/in ") == "/data/photos/in"
