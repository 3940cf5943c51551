"""Main entry point for get-compatible-pgp-subkeys."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import NoReturn

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .classifier import extract_timestamp
from .config import ScanConfig
from .exceptions import KeyFileError, PrimaryKeyError, SourceDirectoryError
from .scanner import DirectoryScanner, ScanResult, ScanStats

LOGGER_NAME = "compatible-subkeys"

DESCRIPTION = """\
Passing a source directory with no other arguments opens each PGP key and
prints its creation timestamp. Further specifying a primary PGP key and
destination directory will move each PGP key if its creation timestamp is
equal to or greater than that of the primary PGP key.

Both raw and ASCII-armored PGP keys are supported.
"""


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments without the program name. Uses sys.argv if None.

    Returns:
        Parsed arguments with ``source_dir``, ``primary_key`` and
        ``destination`` (the last two both None in report mode).

    """
    parser = _ArgumentParser(
        prog="get-compatible-pgp-subkeys",
        usage=(
            "%(prog)s [options] SOURCE_DIRECTORY [PRIMARY_PGP_KEY DESTINATION_DIRECTORY]\n"
            "       %(prog)s --init-config [--config PATH]"
        ),
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        metavar="PATH",
        help="SOURCE_DIRECTORY, optionally followed by PRIMARY_PGP_KEY and DESTINATION_DIRECTORY",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        help="Report compatible keys without moving them",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every file opened",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a default configuration file and exit",
    )

    args = parser.parse_args(argv)

    if args.init_config:
        if args.paths:
            parser.error("--init-config takes no paths")
    elif len(args.paths) not in (1, 3):
        parser.error("expected 1 or 3 paths")

    args.source_dir = args.paths[0] if args.paths else None
    args.primary_key = args.paths[1] if len(args.paths) == 3 else None
    args.destination = args.paths[2] if len(args.paths) == 3 else None
    return args


def setup_logging(config: ScanConfig) -> logging.Logger:
    """Set up logging for a scan.

    Diagnostics go to standard error; standard output carries only
    timestamps.

    Args:
        config: Scan configuration.

    Returns:
        Configured logger instance.

    Raises:
        ValueError: The configured log level is unknown.

    """
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        msg = f"Invalid log_level: {config.log_level}"
        raise ValueError(msg)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicates across runs
    if logger.handlers:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
    )
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def read_primary_timestamp(path: Path) -> int:
    """Get the timestamp every compatible subkey must reach.

    Raises:
        PrimaryKeyError: The primary key could not be read.

    """
    try:
        return extract_timestamp(path)
    except KeyFileError as e:
        raise PrimaryKeyError("Failed to read from primary PGP key", path=path) from e


def print_timestamp(result: ScanResult) -> None:
    """Write a classified key's timestamp to standard output."""
    if result.timestamp is not None:
        print(f"Timestamp: {result.timestamp}")


def print_summary(stats: ScanStats, *, filtering: bool) -> None:
    """Print scan counters as a table on standard error."""
    console = Console(stderr=True)

    table = Table(title="Scan summary")
    table.add_column("Result", style="cyan")
    table.add_column("Files", style="green", justify="right")

    table.add_row("Entries scanned", str(stats.scanned))
    table.add_row("Skipped", str(stats.skipped))
    if filtering:
        table.add_row("Moved", str(stats.moved))
        if stats.compatible:
            table.add_row("Compatible (dry run)", str(stats.compatible))
        table.add_row("Incompatible", str(stats.incompatible))
    else:
        table.add_row("Reported", str(stats.reported))
    table.add_row("Errors", str(stats.errors), style="red" if stats.errors else None)
    table.add_row("Elapsed", f"{(datetime.now() - stats.start_time).total_seconds():.1f}s")

    console.print(table)


def cmd_scan(config: ScanConfig, args: argparse.Namespace, logger: logging.Logger) -> int:
    """Execute the scan in report or filter mode.

    Args:
        config: Scan configuration.
        args: Parsed arguments.
        logger: Logger instance.

    Returns:
        Exit code.

    """
    threshold = None
    if args.primary_key is not None:
        try:
            threshold = read_primary_timestamp(args.primary_key)
        except PrimaryKeyError as e:
            logger.error("%s: %s", e.message, e.__cause__)
            return 1
        logger.info("Primary PGP key timestamp: %d", threshold)

    try:
        scanner = DirectoryScanner(
            config,
            logger,
            threshold=threshold,
            destination=args.destination,
        )
    except OSError as e:
        logger.error("Failed to create destination directory %s: %s", args.destination, e)
        return 1

    try:
        stats = scanner.run(args.source_dir, on_result=print_timestamp)
    except SourceDirectoryError as e:
        logger.error("%s", e)
        return 1

    print_summary(stats, filtering=scanner.filtering)
    return 0


def cmd_init_config(config_path: Path | None) -> int:
    """Write a default configuration file.

    Args:
        config_path: Where to write it. Uses the default path if None.

    Returns:
        Exit code.

    """
    console = Console(stderr=True)

    if config_path is None:
        config_path = ScanConfig.get_config_path()
    if config_path.exists():
        console.print(f"[yellow]Config already exists: {config_path}[/yellow]")
        return 1

    ScanConfig().save(config_path)
    console.print(f"[green]Created config: {config_path}[/green]")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code.

    """
    args = parse_args(argv)

    if args.init_config:
        return cmd_init_config(args.config)

    try:
        config = ScanConfig.load(args.config)
        if args.dry_run:
            config.dry_run = True
        if args.verbose:
            config.log_level = "DEBUG"
        logger = setup_logging(config)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    return cmd_scan(config, args, logger)


if __name__ == "__main__":
    sys.exit(main())
