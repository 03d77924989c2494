from __future__ import annotations

import json
from datetime import datetime

import pytest

from drive_scanner.scannermodel import DriveInfo
from drive_scanner.scannermodel import DriveReport
from drive_scanner.scannermodel import EntryRecord
from drive_scanner.scannermodel import ExtensionBucket
from drive_scanner.scannermodel import FileEntry
from drive_scanner.scannermodel import FolderSizeEntry
from drive_scanner.scannermodel import percent_free


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/foo/bar.txt", "txt"),
        ("/foo/BAR.ISO", "iso"),
        ("/foo/archive.tar.GZ", "gz"),
        ("/foo/Makefile", ""),
        ("/foo/.bashrc", ""),
        ("/foo.d/readme", ""),
        ("C:\\Users\\me\\photo.JPG", "jpg"),
    ],
)
def test_entry_record_extension(path: str, expected: str) -> None:
    record = EntryRecord(path, 1, False, 0.0, 1)

    assert record.extension == expected


def test_extension_bucket_label() -> None:
    assert ExtensionBucket("iso", 1, 1).label == ".iso"
    assert ExtensionBucket("", 1, 1).label == "(no extension)"


def test_file_entry_str() -> None:
    file = FileEntry("/foo/bar.iso", 5 * 1024**2, 1234567890)
    expected_ts = datetime.fromtimestamp(1234567890).strftime("%Y-%m-%d %H:%M:%S")

    assert file.modified == expected_ts
    assert str(file) == f"/foo/bar.iso (5.00 MB, modified {expected_ts})"
    assert file.accessed_at == 0.0


def test_file_entry_accessed() -> None:
    file = FileEntry("/foo/bar.iso", 1, 0.0, 1234567890)
    expected_ts = datetime.fromtimestamp(1234567890).strftime("%Y-%m-%d %H:%M:%S")

    assert file.accessed == expected_ts


def test_percent_free() -> None:
    assert percent_free(50, 200) == 25.0
    assert percent_free(0, 0) == 0.0


def test_drive_info_free_percent() -> None:
    assert DriveInfo("C:/", "C:/", 200, 150, 50).free_percent == 25.0
    assert DriveInfo("C:/", "C:/", 0, 0, 0).free_percent == 0.0


def test_drive_report_as_dict_is_json_serializable() -> None:
    report = DriveReport(
        drive="/",
        root="/",
        total=100,
        used=60,
        free=40,
        folders=(FolderSizeEntry("/foo", 1, 10, 2),),
        extensions=(ExtensionBucket("txt", 10, 2),),
        top_files=(FileEntry("/foo/a.txt", 6, 1.0),),
        recent_files=(),
        stale_files=(FileEntry("/foo/b.txt", 4, 2.0),),
        scan_seconds=0.5,
        truncated=True,
    )

    result = json.loads(json.dumps(report.as_dict()))

    assert report.free_percent == 40.0
    assert result["truncated"] is True
    assert result["folders"] == [
        {"path": "/foo", "depth": 1, "size": 10, "file_count": 2}
    ]
    assert result["stale_files"][0]["path"] == "/foo/b.txt"
    assert result["recent_files"] == []
