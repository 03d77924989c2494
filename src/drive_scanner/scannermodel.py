from __future__ import annotations

import dataclasses
import os
from datetime import datetime
from typing import Any

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
GB = 1024**3
MB = 1024**2


def percent_free(free: int, total: int) -> float:
    """Free space as a percentage of the total, 0 for an empty volume."""
    if not total:
        return 0.0
    return free / total * 100


@dataclasses.dataclass(frozen=True)
class EntryRecord:
    """A single file or directory discovered during a walk."""

    path: str
    size: int
    is_directory: bool
    modified_at: float
    depth: int
    accessed_at: float = 0.0

    @property
    def extension(self) -> str:
        """Lower-cased extension without the leading dot, empty if none."""
        _, ext = os.path.splitext(os.path.basename(self.path))
        return ext[1:].lower()


@dataclasses.dataclass(frozen=True)
class FolderSizeEntry:
    """Cumulative size of a folder at a reportable depth."""

    path: str
    depth: int
    size: int
    file_count: int = 0


@dataclasses.dataclass(frozen=True)
class ExtensionBucket:
    """Total bytes and file count of one file extension."""

    extension: str
    size: int
    count: int

    @property
    def label(self) -> str:
        return f".{self.extension}" if self.extension else "(no extension)"


@dataclasses.dataclass(frozen=True)
class FileEntry:
    """A file listed in the top, recent or stale sections of a report."""

    path: str
    size: int
    modified_at: float
    accessed_at: float = 0.0

    @property
    def modified(self) -> str:
        return datetime.fromtimestamp(self.modified_at).strftime(DATE_FORMAT)

    @property
    def accessed(self) -> str:
        return datetime.fromtimestamp(self.accessed_at).strftime(DATE_FORMAT)

    def __str__(self) -> str:
        return f"{self.path} ({self.size / MB:.2f} MB, modified {self.modified})"


@dataclasses.dataclass(frozen=True)
class DriveInfo:
    """A fixed local volume and its capacity in bytes."""

    identifier: str
    root: str
    total: int
    used: int
    free: int

    @property
    def free_percent(self) -> float:
        return percent_free(self.free, self.total)


@dataclasses.dataclass(frozen=True)
class ScanError:
    """An entry that could not be read during a walk."""

    path: str
    message: str


@dataclasses.dataclass(frozen=True)
class Thresholds:
    """
    Read-only limits applied by the aggregators for one run.

    Sizes are in bytes, windows in days. A `max_temporal_files` of 0 keeps
    every recent and stale file.
    """

    min_folder_size: int = int(0.1 * GB)
    min_extension_size: int = int(0.01 * GB)
    max_folder_depth: int = 3
    top_files_count: int = 10
    min_temporal_file_size: int = 10 * MB
    recent_days: int = 30
    stale_days: int = 180
    max_temporal_files: int = 0

    @property
    def recent_seconds(self) -> int:
        return self.recent_days * 86400

    @property
    def stale_seconds(self) -> int:
        return self.stale_days * 86400


@dataclasses.dataclass(frozen=True)
class DriveReport:
    """The finished summary of one drive for one run."""

    drive: str
    root: str
    total: int
    used: int
    free: int
    folders: tuple[FolderSizeEntry, ...]
    extensions: tuple[ExtensionBucket, ...]
    top_files: tuple[FileEntry, ...]
    recent_files: tuple[FileEntry, ...]
    stale_files: tuple[FileEntry, ...]
    scan_seconds: float
    truncated: bool
    scanned_at: float = 0.0
    file_count: int = 0
    directory_count: int = 0
    skipped_entries: int = 0
    temporal_truncated: bool = False

    @property
    def free_percent(self) -> float:
        return percent_free(self.free, self.total)

    def as_dict(self) -> dict[str, Any]:
        """Return the report as a JSON serializable dictionary."""
        return dataclasses.asdict(self)


@dataclasses.dataclass(frozen=True)
class ScanRun:
    """Everything a multi-drive scan produced."""

    reports: tuple[DriveReport, ...]
    errors: dict[str, str] = dataclasses.field(default_factory=dict)
    skipped: tuple[str, ...] = ()
    cancelled: bool = False
