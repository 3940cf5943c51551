"""
Exception hierarchy for compatible-subkeys.

All exceptions inherit from SubkeyToolError for easy catching.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class SubkeyToolError(Exception):
    """Base exception for all compatible_subkeys errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class KeyFormatError(SubkeyToolError):
    """Key bytes could not yield a timestamp."""


class TruncatedKeyError(KeyFormatError):
    """Fewer bytes available than the field being read."""

    def __init__(self, message: str, *, expected: int, got: int) -> None:
        super().__init__(message, expected=expected, got=got)
        self.expected = expected
        self.got = got


class KeySeekError(KeyFormatError):
    """Repositioning inside the key file failed."""


class DearmorError(KeyFormatError):
    """No decodable timestamp line in an armored key."""


class KeyFileError(SubkeyToolError):
    """Timestamp extraction failed for a specific key file."""

    def __init__(self, message: str, *, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")
        self.reason = message

    def __str__(self) -> str:
        cause = self.__cause__
        if cause is not None:
            return f"{self.message} ({cause})"
        return self.message


class KeyOpenError(KeyFileError):
    """Key file could not be opened."""


class KeyReadError(KeyFileError):
    """Key file could not be read far enough to detect its encoding."""


class PrimaryKeyError(SubkeyToolError):
    """Primary key timestamp could not be read; no comparison is possible."""

    def __init__(self, message: str, *, path: Path | str) -> None:
        super().__init__(message, path=str(path))
        self.path = Path(path)


class SourceDirectoryError(SubkeyToolError):
    """Source directory could not be opened for listing."""

    def __init__(self, message: str, *, path: Path | str) -> None:
        super().__init__(message, path=str(path))
        self.path = Path(path)
