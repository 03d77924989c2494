from __future__ import annotations

import logging
import os
import re
from typing import Any

import psutil

from .scannermodel import DriveInfo

logger = logging.getLogger(__name__)

# Mount options and filesystem types that are never fixed local volumes
REMOVABLE_OPTS = {"cdrom", "removable"}
SKIP_FSTYPES = {
    "tmpfs",
    "devtmpfs",
    "overlay",
    "efivarfs",
    "squashfs",
    "nfs",
    "nfs4",
    "cifs",
    "smbfs",
    "smb3",
    "sshfs",
    "fuse.sshfs",
    "afpfs",
    "webdav",
}
DRIVE_LETTER = re.compile(r"^[a-zA-Z]:?[\\/]?$")
IS_WINDOWS = os.name == "nt"


def _is_fixed(partition: Any) -> bool:
    """True if the partition looks like a fixed, local, non-removable volume."""
    opts = {opt.strip().lower() for opt in partition.opts.split(",")}
    if opts & REMOVABLE_OPTS:
        return False

    if partition.fstype.lower() in SKIP_FSTYPES:
        return False

    # Windows reports unmounted card readers and optical drives with no fstype
    if not partition.fstype:
        return False

    if "/run/credentials" in partition.mountpoint:
        return False

    return True


def normalize_root(path: str) -> str:
    """
    Turn a bare drive letter such as `c` or `C:` into `C:/` on Windows.

    Elsewhere a single letter is a relative directory and is left as given.
    """
    if IS_WINDOWS and DRIVE_LETTER.match(path):
        return f"{path[0].upper()}:/"
    return path


def drive_from_path(path: str) -> DriveInfo:
    """
    Build a DriveInfo for an explicit root path.

    Raises:
        OSError: The capacity of the path cannot be read.
    """
    root = normalize_root(path)
    usage = psutil.disk_usage(root)
    return DriveInfo(
        identifier=root,
        root=root,
        total=usage.total,
        used=usage.used,
        free=usage.free,
    )


def list_fixed_drives() -> list[DriveInfo]:
    """Return every fixed local volume with its capacity."""
    drives: list[DriveInfo] = []
    seen: set[str] = set()

    for partition in psutil.disk_partitions(all=False):
        if not _is_fixed(partition):
            logger.debug("Ignoring non fixed volume '%s'", partition.mountpoint)
            continue

        root = os.path.normpath(partition.mountpoint)
        if root in seen:
            continue
        seen.add(root)

        try:
            drives.append(drive_from_path(partition.mountpoint))

        except OSError as error:
            logger.warning("Cannot read capacity of '%s': %s", root, error)

    logger.debug("Found %s fixed drives", len(drives))

    return drives
