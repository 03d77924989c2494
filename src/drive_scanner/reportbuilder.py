from __future__ import annotations

from .aggregators import AggregatorSet
from .scannermodel import DriveInfo
from .scannermodel import DriveReport


def build_report(
    drive: DriveInfo,
    aggregators: AggregatorSet,
    *,
    scanned_at: float,
    scan_seconds: float,
    truncated: bool,
    skipped_entries: int = 0,
) -> DriveReport:
    """
    Assemble the report of one drive from its merged aggregators.

    Capacity figures come from `drive` as reported by the OS, never from the
    walk. Nothing here touches the filesystem.

    Args:
        drive: The scanned drive and its capacity.
        aggregators: The merged aggregators of every worker of the drive.

    Keyword Args:
        scanned_at: The `now` timestamp used for the age windows.
        scan_seconds: Wall time of the drive scan.
        truncated: True if cancellation interrupted the walk.
        skipped_entries: Number of entries that could not be read.
    """
    return DriveReport(
        drive=drive.identifier,
        root=drive.root,
        total=drive.total,
        used=drive.used,
        free=drive.free,
        folders=tuple(aggregators.folders.results()),
        extensions=tuple(aggregators.extensions.results()),
        top_files=tuple(aggregators.top_files.results()),
        recent_files=tuple(aggregators.recent_files.results()),
        stale_files=tuple(aggregators.stale_files.results()),
        scan_seconds=scan_seconds,
        truncated=truncated,
        scanned_at=scanned_at,
        file_count=aggregators.file_count,
        directory_count=aggregators.directory_count,
        skipped_entries=skipped_entries,
        temporal_truncated=(
            aggregators.recent_files.truncated or aggregators.stale_files.truncated
        ),
    )
