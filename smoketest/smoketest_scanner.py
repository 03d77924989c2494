from __future__ import annotations

import argparse
import logging
import threading

from smoketest_tree import BASE_DIR
from smoketest_tree import TEST_DIR
from smoketest_tree import smoketest_tree

from drive_scanner.cancellation import CancelToken
from drive_scanner.cancellation import install_interrupt_handler
from drive_scanner.scanner import Scanner
from drive_scanner.scannerconfig import ScannerConfig
from drive_scanner.scannerconfig import write_new_config

CONFIG = str(BASE_DIR / "smoketest.ini")


def parse_args() -> tuple[str, float]:
    """Parse command line arguments, return log level and cancel delay."""
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Set the logging level.",
    )
    parser.add_argument(
        "--cancel-after",
        type=float,
        default=0.0,
        help="Cancel the scan after this many seconds. 0 lets it finish.",
    )
    args = parser.parse_args()
    return args.log_level, args.cancel_after


def main() -> int:
    """Scan a generated tree, optionally cancelling part way."""
    level, cancel_after = parse_args()
    logging.basicConfig(level=level, format="%(asctime)s %(message)s")
    write_new_config(CONFIG)
    config = ScannerConfig(CONFIG)
    cancel = CancelToken()
    install_interrupt_handler(cancel)

    with smoketest_tree() as file_count:
        timer = None
        if cancel_after:
            timer = threading.Timer(cancel_after, cancel.set)
            timer.start()

        result = Scanner(config, cancel).run_once([str(TEST_DIR)])

        if timer:
            timer.cancel()

    for report in result.reports:
        print(f"Created {file_count} files, scanned {report.file_count} files")
        print(f"Truncated: {report.truncated}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
