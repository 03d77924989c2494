from __future__ import annotations

from .cancellation import CancelToken
from .scanner import DriveScan
from .scanner import Scanner
from .scannerconfig import ScannerConfig
from .scannermodel import DriveReport
from .scannermodel import Thresholds

__all__ = [
    "CancelToken",
    "DriveReport",
    "DriveScan",
    "Scanner",
    "ScannerConfig",
    "Thresholds",
]
