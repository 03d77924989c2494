from __future__ import annotations

import logging
import os
import random
import shutil
import time
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from string import ascii_lowercase

BASE_DIR: Path = Path(__file__).resolve().parent
TEST_DIR: Path = BASE_DIR / "smoketest_tree"
TOP_LEVEL_COUNT = 8
MAX_DEPTH = 6
FILE_COUNT_RANGE: tuple[int, int] = (5, 40)
FILE_SIZE_RANGE: tuple[int, int] = (0, 256 * 1024)
EXTENSIONS = ["txt", "log", "iso", "zip", "jpg", "", "TXT", "tar.gz"]
CHANCE_OF_SUBDIRECTORY = 0.6  # out of 1.0
DAY = 86400

logger = logging.getLogger(__name__)


def _name() -> str:
    """Create a random eight character name."""
    return "".join(random.choices(ascii_lowercase, k=8))


def _file_name() -> str:
    extension = random.choice(EXTENSIONS)
    return f"{_name()}.{extension}" if extension else _name()


def _create_files(directory: Path) -> int:
    """Create random files with random ages in a directory, return the count."""
    file_count = random.randint(*FILE_COUNT_RANGE)
    now = time.time()

    for _ in range(file_count):
        file_path = directory / _file_name()
        file_path.write_bytes(b"\0" * random.randint(*FILE_SIZE_RANGE))

        # Spread modification times over the last two years
        modified_at = now - random.randint(0, 730) * DAY
        os.utime(file_path, (modified_at, modified_at))

    return file_count


def _build_branch(directory: Path, depth: int) -> int:
    directory.mkdir(parents=True, exist_ok=True)
    file_count = _create_files(directory)

    while depth < MAX_DEPTH and random.random() < CHANCE_OF_SUBDIRECTORY:
        file_count += _build_branch(directory / _name(), depth + 1)

    return file_count


def build_smoketest_tree() -> int:
    """Create the random directory tree for the smoketest, return the file count."""
    file_count = 0
    for _ in range(TOP_LEVEL_COUNT):
        file_count += _build_branch(TEST_DIR / _name(), 1)

    logger.info("Created %s files in %s", file_count, TEST_DIR)
    return file_count


def destroy_smoketest_tree() -> None:
    """Delete the directory tree of the smoketest."""
    logger.debug("Deleting %s", TEST_DIR)
    shutil.rmtree(TEST_DIR)


@contextmanager
def smoketest_tree() -> Generator[int, None, None]:
    """Build the smoketest tree, yield its file count and delete it after."""
    logger.debug("Building smoketest tree...")
    file_count = build_smoketest_tree()

    try:
        yield file_count

    finally:
        logger.debug("Destroying smoketest tree...")
        destroy_smoketest_tree()
