from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import Executor
from concurrent.futures import Future
from concurrent.futures import ThreadPoolExecutor

from .aggregators import AggregatorSet
from .cancellation import CancelToken
from .drives import drive_from_path
from .drives import list_fixed_drives
from .reportbuilder import build_report
from .scannerconfig import ScannerConfig
from .scanneremitter import ReportEmitter
from .scannermodel import DriveInfo
from .scannermodel import DriveReport
from .scannermodel import EntryRecord
from .scannermodel import ScanRun
from .scannermodel import Thresholds
from .treewalker import Lister
from .treewalker import TreeWalker
from .treewalker import scan_directory


class ScannerError(Exception):
    """Base class for scanner errors."""


class DriveUnreachableError(ScannerError):
    """The root of a drive could not be opened."""


class DriveScan:
    """Walk one drive and aggregate its entries into a DriveReport."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        drive: DriveInfo,
        thresholds: Thresholds,
        executor: Executor,
        cancel: CancelToken,
        *,
        lister: Lister = scan_directory,
        exclude_directory_pattern: str | None = None,
        exclude_file_pattern: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize a new DriveScan.

        Args:
            drive: The drive to scan.
            thresholds: The limits applied by the aggregators.
            executor: The pool running the walk of each top-level directory.
                May be shared with other drives.
            cancel: The cancellation flag polled by every walker.

        Keyword Args:
            lister: Lists a directory. Defaults to reading the filesystem.
            exclude_directory_pattern: Directories to leave out of the walk.
            exclude_file_pattern: Files to leave out of the walk.
            clock: Returns `now`, read once at the start of the scan.
        """
        self._drive = drive
        self._thresholds = thresholds
        self._executor = executor
        self._cancel = cancel
        self._lister = lister
        self._exclude_directory_pattern = exclude_directory_pattern
        self._exclude_file_pattern = exclude_file_pattern
        self._clock = clock

    def run(self) -> DriveReport:
        """
        Scan the drive, returning a truncated report if cancelled mid-walk.

        Raises:
            DriveUnreachableError: The drive root could not be listed.
        """
        self.logger.info("Scanning drive %s...", self._drive.identifier)
        tic = time.perf_counter()
        now = self._clock()

        walker = self._new_walker()
        try:
            top_level = walker.list_children(self._drive.root)

        except OSError as error:
            raise DriveUnreachableError(
                f"Cannot open drive root {self._drive.root}: {error}"
            ) from error

        aggregators = AggregatorSet(self._thresholds, now)
        walkers = [walker]
        futures: list[Future[tuple[AggregatorSet, TreeWalker]]] = []

        for record in top_level:
            if self._cancel.is_set():
                walker.truncated = True
                break

            aggregators.add(record)

            if record.is_directory:
                futures.append(self._executor.submit(self._walk_subtree, record, now))

        for future in futures:
            partition, subtree_walker = future.result()
            aggregators.merge(partition)
            walkers.append(subtree_walker)

        truncated = any(each.truncated for each in walkers)
        skipped = sum(len(each.errors) for each in walkers)
        toc = time.perf_counter()

        if truncated:
            self.logger.warning("Scan of %s was cancelled", self._drive.identifier)

        self.logger.info(
            "Drive %s finished in %s seconds", self._drive.identifier, toc - tic
        )
        self.logger.info(
            "Detected %s files, skipped %s unreadable entries",
            aggregators.file_count,
            skipped,
        )

        return build_report(
            self._drive,
            aggregators,
            scanned_at=now,
            scan_seconds=toc - tic,
            truncated=truncated,
            skipped_entries=skipped,
        )

    def _new_walker(self) -> TreeWalker:
        return TreeWalker(
            self._cancel,
            lister=self._lister,
            exclude_directory_pattern=self._exclude_directory_pattern,
            exclude_file_pattern=self._exclude_file_pattern,
        )

    def _walk_subtree(
        self,
        directory: EntryRecord,
        now: float,
    ) -> tuple[AggregatorSet, TreeWalker]:
        """Walk one top-level directory into its own aggregator partition."""
        walker = self._new_walker()
        partition = AggregatorSet(self._thresholds, now)
        partition.add_all(walker.walk(directory.path, directory.depth))

        return partition, walker


class Scanner:
    """Scan every configured drive and emit the reports."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        config: ScannerConfig,
        cancel: CancelToken | None = None,
        *,
        lister: Lister = scan_directory,
    ) -> None:
        """
        Initialize a new Scanner.

        Args:
            config: The configuration to use for this scanner.
            cancel: The cancellation flag of the run. A new, unset flag is
                used if not given.

        Keyword Args:
            lister: Lists a directory. Defaults to reading the filesystem.
        """
        self._config = config
        self._cancel = cancel or CancelToken()
        self._lister = lister
        self._emitter = ReportEmitter(config)

    def run_once(self, roots: list[str] | None = None) -> ScanRun:
        """Scan the drives once and emit the reports."""
        drives, errors = self._resolve_drives(roots)

        result = self.scan(drives)
        errors.update(result.errors)

        for report in result.reports:
            self._emitter.add_report(report)

        self.emit()

        return ScanRun(
            reports=result.reports,
            errors=errors,
            skipped=result.skipped,
            cancelled=result.cancelled,
        )

    def emit(self) -> None:
        """Emit the finished reports to defined outputs."""
        self.logger.info("Emitting reports...")
        tic = time.perf_counter()

        self._emitter.emit()

        toc = time.perf_counter()
        self.logger.info("Emitting finished in %s seconds", toc - tic)

    def scan(self, drives: list[DriveInfo]) -> ScanRun:
        """
        Scan the given drives, up to `parallel_drives` at a time.

        Drives that complete keep their full report. On cancellation the drives
        in progress return truncated reports and drives not yet started are
        listed as skipped. An unreachable drive is reported in `errors` and
        never stops the other drives.
        """
        reports: list[DriveReport] = []
        errors: dict[str, str] = {}
        skipped: list[str] = []

        self.logger.info("Scanning %s drives...", len(drives))
        tic = time.perf_counter()

        with ThreadPoolExecutor(
            max_workers=self._config.max_workers,
            thread_name_prefix="walker",
        ) as walker_pool, ThreadPoolExecutor(
            max_workers=self._config.parallel_drives,
            thread_name_prefix="drive",
        ) as drive_pool:
            futures = [
                (drive, drive_pool.submit(self._scan_drive, drive, walker_pool))
                for drive in drives
            ]

            for drive, future in futures:
                try:
                    report = future.result()

                except DriveUnreachableError as error:
                    self.logger.error("Drive %s skipped: %s", drive.identifier, error)
                    errors[drive.identifier] = str(error)
                    continue

                if report is None:
                    skipped.append(drive.identifier)
                else:
                    reports.append(report)

        toc = time.perf_counter()
        self.logger.info("Scanner finished in %s seconds", toc - tic)

        return ScanRun(
            reports=tuple(reports),
            errors=errors,
            skipped=tuple(skipped),
            cancelled=self._cancel.is_set(),
        )

    def _scan_drive(self, drive: DriveInfo, executor: Executor) -> DriveReport | None:
        """Run the scan of one drive, None if cancelled before it started."""
        if self._cancel.is_set():
            self.logger.info("Skipping drive %s, scan cancelled", drive.identifier)
            return None

        drive_scan = DriveScan(
            drive,
            self._config.thresholds,
            executor,
            self._cancel,
            lister=self._lister,
            exclude_directory_pattern=self._config.exclude_directory_pattern,
            exclude_file_pattern=self._config.exclude_file_pattern,
        )
        return drive_scan.run()

    def _resolve_drives(
        self,
        roots: list[str] | None,
    ) -> tuple[list[DriveInfo], dict[str, str]]:
        """Return the drives to scan and the roots whose capacity is unreadable."""
        roots = roots or self._config.drives
        if not roots:
            return list_fixed_drives(), {}

        drives: list[DriveInfo] = []
        errors: dict[str, str] = {}
        for root in roots:
            try:
                drives.append(drive_from_path(root))

            except OSError as error:
                self.logger.error("Drive %s skipped: %s", root, error)
                errors[root] = str(error)

        return drives, errors
