"""Scan a directory of PGP key files and sort out compatible subkeys."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from .classifier import KeyClassifier
from .exceptions import KeyFileError, SourceDirectoryError
from .relocator import KeyRelocator

if TYPE_CHECKING:
    from .config import ScanConfig


@dataclass(frozen=True)
class CandidateFile:
    """A directory entry and the facts needed to decide if it is a key."""

    path: Path
    size: int
    is_dir: bool

    @classmethod
    def from_entry(cls, entry: os.DirEntry[str]) -> CandidateFile:
        """Stat a directory entry, following symlinks.

        Raises:
            OSError: The entry could not be stat'ed.

        """
        st = entry.stat()
        return cls(
            path=Path(entry.path),
            size=st.st_size,
            is_dir=stat.S_ISDIR(st.st_mode),
        )

    @property
    def is_hidden(self) -> bool:
        """Check if the file name starts with a dot."""
        return self.path.name.startswith(".")

    @property
    def skip_reason(self) -> str | None:
        """Get why this entry is not a key candidate, or None if it is."""
        if self.is_dir:
            return "directory"
        if self.size == 0:
            return "empty"
        if self.is_hidden:
            return "hidden"
        return None


@dataclass
class ScanResult:
    """Outcome for a single directory entry."""

    path: Path
    action: str  # "reported", "moved", "compatible", "incompatible", "skipped", "error"
    timestamp: int | None = None
    destination: Path | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        """Check if the entry was handled without an error."""
        return self.action != "error"


@dataclass
class ScanStats:
    """Counters for a scan."""

    start_time: datetime
    scanned: int = 0
    skipped: int = 0
    reported: int = 0
    moved: int = 0
    compatible: int = 0
    incompatible: int = 0
    errors: int = 0

    def record(self, result: ScanResult) -> None:
        """Count a scan result."""
        self.scanned += 1
        if result.action == "skipped":
            self.skipped += 1
        elif result.action == "reported":
            self.reported += 1
        elif result.action == "moved":
            self.moved += 1
        elif result.action == "compatible":
            self.compatible += 1
        elif result.action == "incompatible":
            self.incompatible += 1
        else:
            self.errors += 1


class DirectoryScanner:
    """Classifies every key file in a directory, one file at a time.

    Without a threshold the scanner only reports timestamps. With one, each
    key whose timestamp is equal to or greater than the threshold is moved
    to the destination directory.
    """

    def __init__(
        self,
        config: ScanConfig,
        logger: logging.Logger,
        *,
        threshold: int | None = None,
        destination: Path | None = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            config: Scan configuration.
            logger: Logger instance.
            threshold: Primary key timestamp; enables filter mode.
            destination: Directory compatible keys are moved into.

        Raises:
            ValueError: Only one of threshold and destination was given.

        """
        if (threshold is None) != (destination is None):
            msg = "threshold and destination must be given together"
            raise ValueError(msg)

        self.config = config
        self.logger = logger
        self.threshold = threshold
        self.classifier = KeyClassifier()
        self.relocator: KeyRelocator | None = None
        if destination is not None:
            self.relocator = KeyRelocator(
                destination,
                logger,
                create=config.create_destination and not config.dry_run,
            )

    @property
    def filtering(self) -> bool:
        """Check if the scanner compares against a primary key."""
        return self.threshold is not None

    def scan(self, directory: Path) -> Iterator[ScanResult]:
        """Classify each entry of a directory in listing order.

        Entries are yielded as they are processed and never collected, so
        directories with millions of keys are scanned in constant memory.
        Per-file failures are yielded as results; they never stop the scan.

        Args:
            directory: Directory to scan (not recursive).

        Yields:
            One ScanResult per directory entry.

        Raises:
            SourceDirectoryError: The directory could not be listed.

        """
        try:
            entries = os.scandir(directory)
        except OSError as e:
            raise SourceDirectoryError(f"Can't open directory: {e}", path=directory) from e

        with entries:
            for entry in entries:
                yield self.process_entry(entry)

    def process_entry(self, entry: os.DirEntry[str]) -> ScanResult:
        """Process a single directory entry."""
        try:
            candidate = CandidateFile.from_entry(entry)
        except OSError as e:
            self.logger.warning("Unable to stat file: %s (%s)", entry.path, e)
            return ScanResult(path=Path(entry.path), action="error", error=f"stat failed: {e}")

        if reason := candidate.skip_reason:
            self.logger.info("Skipping %s file: %s", reason, candidate.path)
            return ScanResult(path=candidate.path, action="skipped", error=reason)

        return self.process_file(candidate.path)

    def process_file(self, path: Path) -> ScanResult:
        """Classify an eligible key file and move it if compatible."""
        self.logger.debug("Opening: %s", path)
        try:
            timestamp = self.classifier.extract_timestamp(path)
        except KeyFileError as e:
            self.logger.error("%s", e)
            return ScanResult(path=path, action="error", error=str(e))

        if self.threshold is None:
            return ScanResult(path=path, action="reported", timestamp=timestamp)

        # A subkey created in the same second as its primary key is still valid
        if timestamp < self.threshold:
            return ScanResult(path=path, action="incompatible", timestamp=timestamp)

        return self._relocate(path, timestamp)

    def _relocate(self, path: Path, timestamp: int) -> ScanResult:
        """Move a compatible key, or only report it in dry-run mode."""
        if self.relocator is None:
            msg = "relocation requested without a destination"
            raise RuntimeError(msg)

        if self.config.dry_run:
            self.logger.info("Compatible PGP subkey (dry run): %s", path)
            return ScanResult(
                path=path,
                action="compatible",
                timestamp=timestamp,
                destination=self.relocator.target_for(path),
            )

        self.logger.info("Moving compatible PGP subkey: %s", path)
        moved = self.relocator.relocate(path)
        if not moved.success:
            return ScanResult(path=path, action="error", timestamp=timestamp, error=moved.error)

        return ScanResult(
            path=path,
            action="moved",
            timestamp=timestamp,
            destination=moved.destination,
        )

    def run(
        self,
        directory: Path,
        on_result: Callable[[ScanResult], None] | None = None,
    ) -> ScanStats:
        """Scan a directory and return only the counters.

        Args:
            directory: Directory to scan.
            on_result: Called with each result as it is produced.

        Returns:
            Counters for the whole scan.

        """
        stats = ScanStats(start_time=datetime.now())
        for result in self.scan(directory):
            stats.record(result)
            if on_result is not None:
                on_result(result)
        return stats
