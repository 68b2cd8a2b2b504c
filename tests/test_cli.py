"""Tests for the command line."""

import logging

import pytest
from click.testing import CliRunner

from conftest import write_jpeg
from photo_organizer import settings as settings_module
from photo_organizer.cli import configure_logging, main
from photo_organizer.settings import ENV_CONFIG


@pytest.fixture(autouse=True)
def no_user_config(monkeypatch, tmp_path):
    monkeypatch.delenv(ENV_CONFIG, raising=False)
    monkeypatch.setattr(settings_module, "DEFAULT_CONFIG_PATH", tmp_path / "absent.json")


@pytest.fixture
def source(tmp_path):
    src = tmp_path / "in"
    write_jpeg(src / "a.jpg", date="2021:01:02 03:04:05")
    write_jpeg(src / "sub" / "b.jpg", date="2022:05:06 07:08:09")
    return src


def invoke(*args):
    return CliRunner().invoke(main, list(args))


def test_organizes_files(source, tmp_path):
    out = tmp_path / "out"
    result = invoke("--source", str(source), "--destination", str(out), "--recursive",
                    "--folder-format", "%year", "--filename-format", "%month_%original_filename")
    assert result.exit_code == 0, result.output
    assert "Done. 2 file(s) processed: 2 organized" in result.output
    assert (out / "2021" / "01_a.jpg").exists()
    assert (out / "2022" / "05_b.jpg").exists()


def test_dry_run_writes_nothing(source, tmp_path):
    out = tmp_path / "out"
    result = invoke("--source", str(source), "--destination", str(out), "--folder-format", "%year", "--dry-run")
    assert result.exit_code == 0, result.output
    assert "1 file(s) processed" in result.output
    assert not out.exists()


def test_missing_formats(source, tmp_path):
    result = invoke("--source", str(source), "--destination", str(tmp_path / "out"))
    assert result.exit_code == 1
    assert "You should provide at least one of the folder or filename format." in result.output


def test_location_placeholder_without_provider(source, tmp_path):
    result = invoke("--source", str(source), "--destination", str(tmp_path / "out"), "--folder-format", "%city")
    assert result.exit_code == 1
    assert "no reverse geocoding provider" in result.output


def test_nominatim_requires_email(source, tmp_path):
    result = invoke("--source", str(source), "--destination", str(tmp_path / "out"),
                    "--folder-format", "%city", "--reverse-geocoding", "nominatim")
    assert result.exit_code == 1
    assert "e-mail" in result.output


def test_bad_size(source, tmp_path):
    result = invoke("--source", str(source), "--destination", str(tmp_path / "out"),
                    "--folder-format", "%year", "--size-lower", "huge")
    assert result.exit_code == 2


def test_missing_source(tmp_path):
    result = invoke("--source", str(tmp_path / "nope"), "--destination", str(tmp_path / "out"),
                    "--folder-format", "%year")
    assert result.exit_code == 1
    assert "Source path not found" in result.output


def test_settings_file_is_used(source, tmp_path):
    config = tmp_path / "conf.json"
    config.write_text('{"folder_format": "from-config/%year", "recursive": true}')
    out = tmp_path / "out"
    result = invoke("--config", str(config), "--source", str(source), "--destination", str(out))
    assert result.exit_code == 0, result.output
    assert (out / "from-config" / "2022" / "b.jpg").exists()


@pytest.mark.parametrize("verbosity,dry_run,level", [
    (0, False, logging.WARNING),
    (0, True, logging.INFO),
    (1, False, logging.INFO),
    (2, False, logging.DEBUG),
])
def test_configure_logging(verbosity, dry_run, level):
    configure_logging(verbosity, dry_run)
    assert logging.getLogger().level == level
