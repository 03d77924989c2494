from __future__ import annotations

import posixpath
from collections.abc import Callable

import pytest

from drive_scanner.treewalker import RawEntry


class FakeTree:
    """An in-memory directory tree usable as a TreeWalker lister."""

    def __init__(self) -> None:
        self.children: dict[str, dict[str, RawEntry]] = {}
        self.denied: set[str] = set()
        self.listed: list[str] = []
        self.on_list: Callable[[str], None] | None = None

    def add_dir(self, path: str, modified_at: float = 0.0) -> None:
        if path in self.children:
            return

        self.children[path] = {}
        parent = posixpath.dirname(path)
        if parent not in ("/", path):
            self.add_dir(parent)
            self.children[parent][path] = RawEntry(path, 0, True, modified_at)

    def add_file(self, path: str, size: int, modified_at: float = 0.0) -> None:
        parent = posixpath.dirname(path)
        self.add_dir(parent)
        self.children[parent][path] = RawEntry(path, size, False, modified_at)

    def __call__(self, path: str) -> list[RawEntry]:
        self.listed.append(path)
        if self.on_list:
            self.on_list(path)

        if path in self.denied:
            raise PermissionError(f"Permission denied: '{path}'")

        if path not in self.children:
            raise FileNotFoundError(f"No such file or directory: '{path}'")

        return list(self.children[path].values())


@pytest.fixture
def fake_tree() -> FakeTree:
    return FakeTree()
