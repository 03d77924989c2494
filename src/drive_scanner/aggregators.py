"""
Reducers over the entry stream of a drive walk.

Every aggregator exposes add(), merge() and results(). Workers each own a
partition and the partitions are merged once the drive walk is done. merge()
is commutative and associative so partitions can be merged in any order.
"""
from __future__ import annotations

import heapq
import os
from collections.abc import Iterable

from .scannermodel import EntryRecord
from .scannermodel import ExtensionBucket
from .scannermodel import FileEntry
from .scannermodel import FolderSizeEntry
from .scannermodel import Thresholds

RECENT = "recent"
STALE = "stale"


def classify_age(age_seconds: float, thresholds: Thresholds) -> str | None:
    """
    Classify a file age as recent, stale or neither.

    Both bounds are inclusive. Recent is checked first, so a file is never
    both even when the configured windows overlap.
    """
    if age_seconds <= thresholds.recent_seconds:
        return RECENT

    if age_seconds >= thresholds.stale_seconds:
        return STALE

    return None


class _Ranked:
    """Heap item ordering files by size, then by path descending."""

    __slots__ = ("entry",)

    def __init__(self, entry: FileEntry) -> None:
        self.entry = entry

    def __lt__(self, other: _Ranked) -> bool:
        # Among equal sizes the smaller path ranks higher
        return (self.entry.size, other.entry.path) < (other.entry.size, self.entry.path)


class FileRanking:
    """
    Keep the highest ranked files, up to `capacity` (0 or less keeps everything).

    Files rank by size. Equal sizes rank by path, lexicographically smaller
    first. A newcomer only displaces the lowest held file if it ranks strictly
    higher, so the kept set never depends on insertion order.
    """

    def __init__(self, capacity: int = 0) -> None:
        self.capacity = capacity
        self.dropped = False
        self._heap: list[_Ranked] = []

    def __len__(self) -> int:
        return len(self._heap)

    def add(self, entry: FileEntry) -> None:
        item = _Ranked(entry)

        if self.capacity <= 0 or len(self._heap) < self.capacity:
            heapq.heappush(self._heap, item)
            return

        self.dropped = True
        if self._heap[0] < item:
            heapq.heapreplace(self._heap, item)

    def merge(self, other: FileRanking) -> FileRanking:
        self.dropped = self.dropped or other.dropped
        for item in other._heap:
            self.add(item.entry)
        return self

    def ranked(self) -> list[FileEntry]:
        """Return the kept files, highest ranked first."""
        return [item.entry for item in sorted(self._heap, reverse=True)]


class FolderSizeAggregator:
    """Roll file sizes up into every ancestor folder at depth 1..max depth."""

    def __init__(self, thresholds: Thresholds) -> None:
        self._thresholds = thresholds
        # path -> [depth, size, file_count]
        self._folders: dict[str, list[int]] = {}

    def add(self, record: EntryRecord) -> None:
        if record.is_directory:
            return

        max_depth = self._thresholds.max_folder_depth
        ancestor = os.path.dirname(record.path)
        depth = record.depth - 1

        # Walk up to the deepest reportable ancestor
        while depth > max_depth:
            ancestor = os.path.dirname(ancestor)
            depth -= 1

        while depth >= 1:
            totals = self._folders.setdefault(ancestor, [depth, 0, 0])
            totals[1] += record.size
            totals[2] += 1
            ancestor = os.path.dirname(ancestor)
            depth -= 1

    def merge(self, other: FolderSizeAggregator) -> FolderSizeAggregator:
        for path, (depth, size, count) in other._folders.items():
            totals = self._folders.setdefault(path, [depth, 0, 0])
            totals[1] += size
            totals[2] += count
        return self

    def totals(self) -> dict[str, int]:
        """Unfiltered cumulative size of every tracked folder."""
        return {path: size for path, (_, size, _) in self._folders.items()}

    def results(self) -> list[FolderSizeEntry]:
        """Folders at or above the minimum size, largest first."""
        minimum = self._thresholds.min_folder_size
        folders = [
            FolderSizeEntry(path, depth, size, count)
            for path, (depth, size, count) in self._folders.items()
            if size >= minimum
        ]
        return sorted(folders, key=lambda folder: (-folder.size, folder.path))


class ExtensionHistogramAggregator:
    """Total bytes and file count per lower-cased file extension."""

    def __init__(self, thresholds: Thresholds) -> None:
        self._thresholds = thresholds
        # extension -> [size, count]
        self._buckets: dict[str, list[int]] = {}

    def add(self, record: EntryRecord) -> None:
        if record.is_directory:
            return

        bucket = self._buckets.setdefault(record.extension, [0, 0])
        bucket[0] += record.size
        bucket[1] += 1

    def merge(
        self,
        other: ExtensionHistogramAggregator,
    ) -> ExtensionHistogramAggregator:
        for extension, (size, count) in other._buckets.items():
            bucket = self._buckets.setdefault(extension, [0, 0])
            bucket[0] += size
            bucket[1] += count
        return self

    def totals(self) -> list[ExtensionBucket]:
        """Every bucket, before the minimum size filter."""
        return [
            ExtensionBucket(extension, size, count)
            for extension, (size, count) in self._buckets.items()
        ]

    def results(self) -> list[ExtensionBucket]:
        """Buckets at or above the minimum size, largest first."""
        minimum = self._thresholds.min_extension_size
        buckets = [bucket for bucket in self.totals() if bucket.size >= minimum]
        return sorted(buckets, key=lambda bucket: (-bucket.size, bucket.extension))


class TopFilesAggregator:
    """The N largest files of the walk."""

    def __init__(self, thresholds: Thresholds) -> None:
        self._ranking = FileRanking(max(thresholds.top_files_count, 0))
        self._disabled = thresholds.top_files_count <= 0

    def add(self, record: EntryRecord) -> None:
        if record.is_directory or self._disabled:
            return

        self._ranking.add(
            FileEntry(record.path, record.size, record.modified_at, record.accessed_at)
        )

    def merge(self, other: TopFilesAggregator) -> TopFilesAggregator:
        self._ranking.merge(other._ranking)
        return self

    def results(self) -> list[FileEntry]:
        return self._ranking.ranked()


class _TemporalAggregator:
    """Collect files of at least the temporal size threshold in one age window."""

    window: str = ""

    def __init__(self, thresholds: Thresholds, now: float) -> None:
        self._thresholds = thresholds
        self._now = now
        self._ranking = FileRanking(thresholds.max_temporal_files)

    @property
    def truncated(self) -> bool:
        """True if the cap dropped at least one matching file."""
        return self._ranking.dropped

    def add(self, record: EntryRecord) -> None:
        if record.is_directory:
            return

        if record.size < self._thresholds.min_temporal_file_size:
            return

        if classify_age(self._now - record.modified_at, self._thresholds) != self.window:
            return

        self._ranking.add(
            FileEntry(record.path, record.size, record.modified_at, record.accessed_at)
        )

    def merge(self, other: _TemporalAggregator) -> _TemporalAggregator:
        self._ranking.merge(other._ranking)
        return self

    def results(self) -> list[FileEntry]:
        """Matching files, largest first."""
        return self._ranking.ranked()


class RecentFilesAggregator(_TemporalAggregator):
    """Files modified within the recent window."""

    window = RECENT


class StaleFilesAggregator(_TemporalAggregator):
    """Files not modified for at least the stale window."""

    window = STALE


class AggregatorSet:
    """The five aggregators fed by one worker, plus entry counters."""

    def __init__(self, thresholds: Thresholds, now: float) -> None:
        self.folders = FolderSizeAggregator(thresholds)
        self.extensions = ExtensionHistogramAggregator(thresholds)
        self.top_files = TopFilesAggregator(thresholds)
        self.recent_files = RecentFilesAggregator(thresholds, now)
        self.stale_files = StaleFilesAggregator(thresholds, now)

        self.file_count = 0
        self.directory_count = 0

    def add(self, record: EntryRecord) -> None:
        if record.is_directory:
            self.directory_count += 1
            return

        self.file_count += 1
        self.folders.add(record)
        self.extensions.add(record)
        self.top_files.add(record)
        self.recent_files.add(record)
        self.stale_files.add(record)

    def add_all(self, records: Iterable[EntryRecord]) -> AggregatorSet:
        for record in records:
            self.add(record)
        return self

    def merge(self, other: AggregatorSet) -> AggregatorSet:
        self.folders.merge(other.folders)
        self.extensions.merge(other.extensions)
        self.top_files.merge(other.top_files)
        self.recent_files.merge(other.recent_files)
        self.stale_files.merge(other.stale_files)

        self.file_count += other.file_count
        self.directory_count += other.directory_count
        return self
