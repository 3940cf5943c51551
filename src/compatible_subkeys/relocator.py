"""Move compatible key files into the destination directory."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path


@dataclass
class RelocationResult:
    """Result of a relocation attempt."""

    path: Path
    success: bool
    destination: Path | None = None
    error: str | None = None


class KeyRelocator:
    """Moves key files into a destination directory, keeping base names."""

    def __init__(
        self,
        destination: Path,
        logger: logging.Logger,
        *,
        create: bool = False,
    ) -> None:
        """Initialize the relocator.

        Args:
            destination: Directory compatible keys are moved into.
            logger: Logger instance.
            create: Create the destination directory if it is missing.

        """
        self.destination = destination
        self.logger = logger
        if create:
            self._ensure_destination()

    def _ensure_destination(self) -> None:
        """Ensure the destination directory exists."""
        self.destination.mkdir(parents=True, exist_ok=True)

    def target_for(self, path: Path) -> Path:
        """Get the path a key file would be moved to."""
        return self.destination / path.name

    def relocate(self, path: Path) -> RelocationResult:
        """Move a key file into the destination directory.

        A failed move leaves the file in place.

        Args:
            path: Key file to move.

        Returns:
            RelocationResult with operation details.

        """
        target = self.target_for(path)

        # shutil.move would nest the key inside an existing directory
        if target.is_dir():
            self.logger.error("Failed to move PGP key file %s: %s is a directory", path, target)
            return RelocationResult(
                path=path,
                success=False,
                error=f"Destination is a directory: {target}",
            )

        try:
            shutil.move(str(path), str(target))
        except PermissionError as e:
            self.logger.error("Permission denied moving PGP key file %s: %s", path, e)
            return RelocationResult(
                path=path,
                success=False,
                error=f"Permission denied: {e}",
            )
        except OSError as e:
            self.logger.error("Failed to move PGP key file %s: %s", path, e)
            return RelocationResult(
                path=path,
                success=False,
                error=str(e),
            )

        self.logger.debug("Moved %s -> %s", path.name, target)
        return RelocationResult(path=path, success=True, destination=target)
