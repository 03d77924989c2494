from __future__ import annotations

import argparse
import logging
from pathlib import Path

from drive_scanner.cancellation import CancelToken
from drive_scanner.cancellation import install_interrupt_handler
from drive_scanner.scanner import Scanner
from drive_scanner.scannerconfig import ScannerConfig
from drive_scanner.scannerconfig import write_new_config

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Scan fixed drives and report folder, file type and file age usage.",
    )
    parser.add_argument(
        "config",
        type=str,
        help="The path to the configuration file.",
    )
    parser.add_argument(
        "--drive",
        help="A drive root to scan, repeatable. Overrides the configured drives.",
        dest="drives",
        default=[],
        action="append",
    )
    parser.add_argument(
        "--debug",
        help="Enable debug logging.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--log-file",
        help="Enable logging to a file next to the config file.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--make-config",
        help="Create a default configuration file.",
        default=False,
        action="store_true",
    )
    return parser.parse_args(args)


def add_file_handler_to_logging(config_filepath: str) -> None:
    """Add a file handler to the root logger next to the config file provided."""
    filepath = Path(config_filepath).absolute()
    log_filepath = filepath.parent / f"{filepath.stem}.log"
    file_handler = logging.FileHandler(log_filepath)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logging.getLogger().addHandler(file_handler)


def main(*, cli_args: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(cli_args)

    if args.make_config:
        write_new_config(args.config)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    if args.log_file:
        add_file_handler_to_logging(args.config)

    config = ScannerConfig(args.config)
    cancel = CancelToken()
    install_interrupt_handler(cancel)

    scanner = Scanner(config, cancel)
    result = scanner.run_once(args.drives or None)

    if result.errors and not result.reports:
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
