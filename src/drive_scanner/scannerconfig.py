from __future__ import annotations

import logging
import os
from configparser import ConfigParser

from .scannermodel import GB
from .scannermodel import MB
from .scannermodel import Thresholds

NEW_CONFIG = """\
[system]
# config_name is used to name the report files.
config_name = {filename}
# Worker threads shared by every drive of a run.
max_workers = 8
# Number of drives scanned at the same time. 1 scans drives in sequence.
parallel_drives = 1

[scanner]
# One root per line. Leave empty to scan every fixed local drive.
drives =

# Exclude directories and files from the scan.
# The following are regular expressions and are matched against the full path.
# Multiline values are combined into a single regular expression.
exclude_directories =
exclude_files =

[thresholds]
min_folder_size_gb = 0.1
min_extension_size_gb = 0.01
max_folder_depth = 3
top_files_count = 10
# Recent and stale files smaller than this are not reported.
min_temporal_file_size_mb = 10
recent_days = 30
stale_days = 180
# 0 reports every recent and stale file.
max_temporal_files = 0

[emit]
# Emit reports to the following destinations.
stdout = true
file = false

    """


class ScannerConfig:
    """Configuration for the Scanner."""

    logger = logging.getLogger("drive_scanner.ScannerConfig")

    def __init__(self, filepath: str) -> None:
        """Load the configuration from the given file."""
        self._config = ConfigParser()
        success = self._config.read(filepath)

        if not success:
            raise ValueError(f"Could not read config file at {filepath}")

        self.logger.debug("Loaded config from %s", filepath)

    @property
    def config_name(self) -> str:
        """Return the name of the config."""
        return self._config.get("system", "config_name", fallback="drive_scanner")

    @property
    def max_workers(self) -> int:
        """Return the size of the walker thread pool."""
        return max(self._config.getint("system", "max_workers", fallback=8), 1)

    @property
    def parallel_drives(self) -> int:
        """Return how many drives may be scanned at the same time."""
        return max(self._config.getint("system", "parallel_drives", fallback=1), 1)

    @property
    def drives(self) -> list[str]:
        """Return the drive roots to scan, empty to scan all fixed drives."""
        config_line = self._config.get("scanner", "drives", fallback="")
        return [line.strip() for line in config_line.splitlines() if line.strip()]

    @property
    def exclude_directory_pattern(self) -> str | None:
        """Return the pattern to exclude directories from the scan."""
        config_line = self._config.get("scanner", "exclude_directories", fallback="")
        lines = [line.strip() for line in config_line.splitlines() if line.strip()]
        return "|".join(lines) or None

    @property
    def exclude_file_pattern(self) -> str | None:
        """Return the pattern to exclude files from the scan."""
        config_line = self._config.get("scanner", "exclude_files", fallback="")
        lines = [line.strip() for line in config_line.splitlines() if line.strip()]
        return "|".join(lines) or None

    @property
    def thresholds(self) -> Thresholds:
        """
        Return the aggregation limits, converted to bytes.

        Raises:
            ValueError: A threshold is negative or the stale window does not
                start after the recent window.
        """
        section = "thresholds"
        defaults = Thresholds()
        get = self._config.getfloat
        getint = self._config.getint

        thresholds = Thresholds(
            min_folder_size=int(
                get(section, "min_folder_size_gb", fallback=defaults.min_folder_size / GB)
                * GB
            ),
            min_extension_size=int(
                get(
                    section,
                    "min_extension_size_gb",
                    fallback=defaults.min_extension_size / GB,
                )
                * GB
            ),
            max_folder_depth=getint(
                section, "max_folder_depth", fallback=defaults.max_folder_depth
            ),
            top_files_count=getint(
                section, "top_files_count", fallback=defaults.top_files_count
            ),
            min_temporal_file_size=int(
                get(
                    section,
                    "min_temporal_file_size_mb",
                    fallback=defaults.min_temporal_file_size / MB,
                )
                * MB
            ),
            recent_days=getint(section, "recent_days", fallback=defaults.recent_days),
            stale_days=getint(section, "stale_days", fallback=defaults.stale_days),
            max_temporal_files=getint(
                section, "max_temporal_files", fallback=defaults.max_temporal_files
            ),
        )

        if min(
            thresholds.min_folder_size,
            thresholds.min_extension_size,
            thresholds.max_folder_depth,
            thresholds.top_files_count,
            thresholds.min_temporal_file_size,
            thresholds.recent_days,
            thresholds.max_temporal_files,
        ) < 0:
            raise ValueError("Thresholds cannot be negative")

        if thresholds.stale_days <= thresholds.recent_days:
            raise ValueError("stale_days must be greater than recent_days")

        return thresholds

    @property
    def emit_stdout(self) -> bool:
        """Return whether to emit reports to stdout."""
        return self._config.getboolean("emit", "stdout", fallback=True)

    @property
    def emit_file(self) -> bool:
        """Return whether to emit reports to a file."""
        return self._config.getboolean("emit", "file", fallback=False)


def write_new_config(filename: str) -> None:
    """Write a new config file if one does not exist."""
    if os.path.exists(filename):
        return

    config_name = os.path.splitext(os.path.basename(filename))[0]
    config = NEW_CONFIG.format(filename=config_name)

    with open(filename, "w") as config_file:
        config_file.write(config)
