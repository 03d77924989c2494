from __future__ import annotations

import os
import tempfile

import pytest

from drive_scanner.scannerconfig import NEW_CONFIG
from drive_scanner.scannerconfig import ScannerConfig
from drive_scanner.scannerconfig import write_new_config
from drive_scanner.scannermodel import GB
from drive_scanner.scannermodel import MB
from drive_scanner.scannermodel import Thresholds

CONFIG_PATH = "tests/test_config.ini"


def test_scannerconfig_raises_on_invalid_config_path() -> None:
    with pytest.raises(ValueError):
        ScannerConfig("foo/bar")


def test_scannerconfig_loads_test_fixture_completely() -> None:
    config = ScannerConfig(CONFIG_PATH)

    assert config.config_name == "test_scanner"
    assert config.max_workers == 4
    assert config.parallel_drives == 2

    assert config.drives == ["tests/fixture_drive", "C"]
    assert config.exclude_directory_pattern == r"\/\.git$|\\\.git$"
    assert config.exclude_file_pattern == r"\.tmp$"

    assert config.thresholds == Thresholds(
        min_folder_size=int(0.5 * GB),
        min_extension_size=int(0.05 * GB),
        max_folder_depth=2,
        top_files_count=5,
        min_temporal_file_size=1 * MB,
        recent_days=7,
        stale_days=365,
        max_temporal_files=20,
    )

    assert config.emit_stdout is False
    assert config.emit_file is False


def test_empty_sections_fall_back_to_defaults() -> None:
    config = ScannerConfig(CONFIG_PATH)
    for section in ("system", "scanner", "thresholds", "emit"):
        del config._config[section]

    assert config.config_name == "drive_scanner"
    assert config.max_workers == 8
    assert config.parallel_drives == 1
    assert config.drives == []
    assert config.exclude_directory_pattern is None
    assert config.exclude_file_pattern is None
    assert config.thresholds == Thresholds()
    assert config.emit_stdout is True
    assert config.emit_file is False


def test_default_thresholds_match_documented_values() -> None:
    thresholds = Thresholds()

    assert thresholds.min_folder_size == int(0.1 * GB)
    assert thresholds.min_extension_size == int(0.01 * GB)
    assert thresholds.max_folder_depth == 3
    assert thresholds.recent_seconds == 30 * 86400
    assert thresholds.stale_seconds == 180 * 86400


@pytest.mark.parametrize(
    "key, value",
    [
        ("recent_days", "400"),
        ("stale_days", "7"),
        ("top_files_count", "-1"),
        ("min_folder_size_gb", "-0.5"),
    ],
)
def test_invalid_thresholds_raise(key: str, value: str) -> None:
    config = ScannerConfig(CONFIG_PATH)
    config._config.set("thresholds", key, value)

    with pytest.raises(ValueError):
        config.thresholds


def test_worker_counts_are_at_least_one() -> None:
    config = ScannerConfig(CONFIG_PATH)
    config._config.set("system", "max_workers", "0")
    config._config.set("system", "parallel_drives", "-3")

    assert config.max_workers == 1
    assert config.parallel_drives == 1


def test_write_new_config() -> None:
    try:
        fd, filename = tempfile.mkstemp(suffix=".ini")
        os.close(fd)
        os.remove(filename)
        config_name = os.path.splitext(os.path.basename(filename))[0]
        expected = NEW_CONFIG.format(filename=config_name)

        write_new_config(filename)

        with open(filename) as f:
            content = f.read()

        assert content == expected
        assert ScannerConfig(filename).thresholds == Thresholds()

    finally:
        os.remove(filename)


def test_write_new_config_early_exit_when_exists() -> None:
    try:
        fd, filename = tempfile.mkstemp(suffix=".ini")
        os.close(fd)

        write_new_config(filename)

        with open(filename) as f:
            content = f.read()

        assert content == ""

    finally:
        os.remove(filename)
