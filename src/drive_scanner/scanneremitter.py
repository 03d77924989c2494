from __future__ import annotations

import json
import logging
from collections import deque
from datetime import datetime

from .scannerconfig import ScannerConfig
from .scannermodel import DATE_FORMAT
from .scannermodel import GB
from .scannermodel import MB
from .scannermodel import DriveReport
from .scannermodel import FileEntry

SECTION_LIMIT = 10


def printable(path: str) -> str:
    """
    Return `path` safe to write as UTF-8.

    Filename bytes the OS could not decode are kept as lone surrogates, which
    cannot be encoded. They are shown as backslash escapes such as `\\udce9`.
    """
    return path.encode("utf-8", "backslashreplace").decode("utf-8")


def render_report(report: DriveReport, *, limit: int = SECTION_LIMIT) -> list[str]:
    """
    Render a drive report as human readable lines.

    Args:
        report: The report to render.

    Keyword Args:
        limit: The maximum number of rows shown per section. Defaults to 10.
    """
    scanned_at = datetime.fromtimestamp(report.scanned_at).strftime(DATE_FORMAT)
    lines = [
        "",
        "=== Storage Distribution Analysis ===",
        f"Date: {scanned_at}",
        f"Drive: {printable(report.drive)}",
    ]
    if report.truncated:
        lines.append("WARNING: scan was cancelled, this report is incomplete")

    lines.extend(
        [
            "",
            "--- Drive Space Overview ---",
            f"Total Size: {report.total / GB:.2f} GB",
            f"Used Space: {report.used / GB:.2f} GB",
            f"Free Space: {report.free / GB:.2f} GB ({report.free_percent:.2f}%)",
            f"Scanned: {report.file_count} files, {report.directory_count} folders"
            f" in {report.scan_seconds:.2f} seconds"
            f" ({report.skipped_entries} unreadable entries skipped)",
        ]
    )

    lines.extend(["", f"--- Largest Folders (Top {limit}) ---"])
    for idx, folder in enumerate(report.folders[:limit], start=1):
        lines.append(f"[{idx}] {printable(folder.path)}")
        lines.append(f"  Size: {folder.size / GB:.2f} GB")
        lines.append(f"  Files: {folder.file_count}")

    lines.extend(["", f"--- File Type Distribution (Top {limit}) ---"])
    for bucket in report.extensions[:limit]:
        lines.append(f"[>] {bucket.label}")
        lines.append(f"  Count: {bucket.count}")
        lines.append(f"  Size: {bucket.size / GB:.2f} GB")

    sections = [
        ("Largest Files", report.top_files),
        ("Recent Large Files", report.recent_files),
        ("Old Large Files", report.stale_files),
    ]
    for title, files in sections:
        lines.extend(["", f"--- {title} ---"])
        lines.extend(_render_file(file) for file in files[:limit])

    return lines


def _render_file(file: FileEntry) -> str:
    return (
        f"[*] {printable(file.path)}\n"
        f"    Size: {file.size / MB:.2f} MB / {file.size / GB:.2f} GB\n"
        f"    Last Modified: {file.modified}\n"
        f"    Last Accessed: {file.accessed}"
    )


class ReportEmitter:
    """A class to emit drive reports to various targets."""

    logger = logging.getLogger(__name__)

    def __init__(self, config: ScannerConfig) -> None:
        """Initialize the emitter."""
        self._config = config
        self._reports: deque[DriveReport] = deque()

    def add_report(self, report: DriveReport) -> None:
        """Queue a finished report to be emitted."""
        self._reports.append(report)

    def emit(self) -> None:
        """Emit all queued reports to the configured targets. Empties the queue."""
        count = 0
        while self._reports:
            report = self._reports.popleft()

            self.to_stdout(report)
            self.to_file(report)

            count += 1

        self.logger.info("Emitted %d drive reports.", count)

    def to_stdout(self, report: DriveReport) -> None:
        """Print the rendered report to stdout."""
        if not self._config.emit_stdout:
            return

        print("\n".join(render_report(report)))

        self.logger.debug("Emitted report of %s to stdout", report.drive)

    def to_file(self, report: DriveReport) -> None:
        """
        Append the report as a single JSON line to a file.

        Output:
            A file named <config_name>_<date>_drive_reports.jsonl
        """
        if not self._config.emit_file:
            return

        date = datetime.now().strftime("%Y%m%d")
        filename = f"{self._config.config_name}_{date}_drive_reports.jsonl"

        with open(filename, "a") as file_out:
            file_out.write(json.dumps(report.as_dict()) + "\n")

        self.logger.debug("Emitted report of %s to %s", report.drive, filename)
