from __future__ import annotations

import dataclasses
import logging
import os
import re
from collections.abc import Callable
from collections.abc import Iterator
from collections.abc import Sequence
from typing import Union

from .cancellation import CancelToken
from .scannermodel import EntryRecord
from .scannermodel import ScanError


@dataclasses.dataclass(frozen=True)
class RawEntry:
    """Metadata of one directory child as reported by the filesystem."""

    path: str
    size: int
    is_directory: bool
    modified_at: float
    accessed_at: float = 0.0


Listing = Sequence[Union[RawEntry, ScanError]]
Lister = Callable[[str], Listing]


def scan_directory(path: str) -> list[RawEntry | ScanError]:
    """
    List the children of a directory with their metadata.

    Symbolic links are not followed. A child whose metadata cannot be read is
    returned as a ScanError in place of its entry.

    Raises:
        OSError: The directory itself could not be listed.
    """
    children: list[RawEntry | ScanError] = []

    with os.scandir(path) as entries:
        for entry in entries:
            try:
                is_directory = entry.is_dir(follow_symlinks=False)
                stat = entry.stat(follow_symlinks=False)

            except OSError as error:
                children.append(ScanError(entry.path, str(error)))
                continue

            children.append(
                RawEntry(
                    path=entry.path,
                    size=0 if is_directory else stat.st_size,
                    is_directory=is_directory,
                    modified_at=stat.st_mtime,
                    accessed_at=stat.st_atime,
                )
            )

    return children


class TreeWalker:
    """Lazily walk a directory tree, yielding an EntryRecord per entry."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        cancel: CancelToken,
        *,
        lister: Lister = scan_directory,
        exclude_directory_pattern: str | None = None,
        exclude_file_pattern: str | None = None,
    ) -> None:
        """
        Initialize a new TreeWalker.

        Args:
            cancel: Polled before entering each directory and before emitting
                each entry. Once set, the walk stops and `truncated` is True.

        Keyword Args:
            lister: Returns the children of a directory. Defaults to reading
                the local filesystem.
            exclude_directory_pattern: Directories whose full path matches are
                neither emitted nor descended into.
            exclude_file_pattern: Files whose full path matches are not emitted.
        """
        self._cancel = cancel
        self._lister = lister
        self._exclude_directory = (
            re.compile(exclude_directory_pattern) if exclude_directory_pattern else None
        )
        self._exclude_file = (
            re.compile(exclude_file_pattern) if exclude_file_pattern else None
        )

        self.truncated = False
        self.errors: list[ScanError] = []

    def list_children(self, path: str, depth: int = 0) -> list[EntryRecord]:
        """
        Return the records of the direct children of `path`.

        Unreadable children are recorded in `errors` and skipped.

        Raises:
            OSError: The directory could not be listed.
        """
        records: list[EntryRecord] = []
        for child in self._lister(path):
            if isinstance(child, ScanError):
                self._record_error(child)
                continue

            if self._is_excluded(child):
                continue

            records.append(
                EntryRecord(
                    path=child.path,
                    size=0 if child.is_directory else child.size,
                    is_directory=child.is_directory,
                    modified_at=child.modified_at,
                    accessed_at=child.accessed_at,
                    depth=depth + 1,
                )
            )

        return records

    def walk(self, path: str, depth: int = 0) -> Iterator[EntryRecord]:
        """
        Yield every entry beneath `path`, depth first, at any depth.

        Args:
            path: The directory to walk. It is not itself emitted.
            depth: The depth of `path` relative to the drive root.
        """
        stack: list[tuple[str, int]] = [(path, depth)]

        while stack:
            if self._is_cancelled():
                return

            dirpath, dirdepth = stack.pop()

            try:
                children = self.list_children(dirpath, dirdepth)

            except OSError as error:
                # Permission denied or the directory vanished mid-walk
                self._record_error(ScanError(dirpath, str(error)))
                continue

            subdirectories: list[tuple[str, int]] = []
            for record in children:
                if self._is_cancelled():
                    return

                yield record

                if record.is_directory:
                    subdirectories.append((record.path, record.depth))

            stack.extend(reversed(subdirectories))

    def _is_cancelled(self) -> bool:
        if self._cancel.is_set():
            self.truncated = True
        return self.truncated

    def _is_excluded(self, child: RawEntry) -> bool:
        """True if the child matches the configured exclusion pattern."""
        pattern = self._exclude_directory if child.is_directory else self._exclude_file
        if pattern and pattern.search(child.path):
            self.logger.debug("Ignoring '%s'", child.path)
            return True

        return False

    def _record_error(self, error: ScanError) -> None:
        self.logger.debug("Skipping unreadable '%s': %s", error.path, error.message)
        self.errors.append(error)
