"""Read the creation timestamp of a PGP key file, raw or armored."""

from __future__ import annotations

from pathlib import Path

from .detector import ARMOR_PREFIX, KeyEncoding, detect_encoding
from .exceptions import KeyFileError, KeyFormatError, KeyOpenError, KeyReadError
from .extractor import (
    TIMESTAMP_B64_SLICE,
    TIMESTAMP_SIZE,
    read_armored_timestamp,
    read_raw_timestamp,
)


class KeyClassifier:
    """Extracts key creation timestamps one file at a time.

    The detection, timestamp and base64 buffers are allocated once and
    reused for every file, so classifying a file allocates nothing that
    outlives the call.
    """

    def __init__(self) -> None:
        self._prefix = bytearray(len(ARMOR_PREFIX))
        self._field = bytearray(TIMESTAMP_SIZE)
        self._scratch = bytearray(TIMESTAMP_B64_SLICE)

    def extract_timestamp(self, path: Path) -> int:
        """Get the creation timestamp of a key file.

        Args:
            path: Path to a raw or ASCII-armored key.

        Returns:
            Seconds since the Unix epoch.

        Raises:
            KeyOpenError: The file could not be opened.
            KeyReadError: The file is too short to detect its encoding.
            KeyFileError: The timestamp could not be extracted.

        """
        try:
            stream = path.open("rb")
        except OSError as e:
            raise KeyOpenError("Failed to open PGP key", path=path) from e

        with stream:
            try:
                encoding = detect_encoding(stream, self._prefix)
            except (KeyFormatError, OSError) as e:
                raise KeyReadError("Failed to read PGP key", path=path) from e

            try:
                if encoding is KeyEncoding.RAW:
                    read_raw_timestamp(stream, self._field)
                else:
                    read_armored_timestamp(stream, self._field, self._scratch)
            except (KeyFormatError, OSError) as e:
                if encoding is KeyEncoding.RAW:
                    message = "Failed to extract timestamp from raw PGP key"
                else:
                    message = "Failed to dearmor and extract timestamp from PGP key"
                raise KeyFileError(message, path=path) from e

        # Key files store the field in network byte order
        return int.from_bytes(self._field, "big")


def extract_timestamp(path: Path | str) -> int:
    """Get the creation timestamp of a single key file.

    Args:
        path: Path to a raw or ASCII-armored key.

    Returns:
        Seconds since the Unix epoch.

    """
    return KeyClassifier().extract_timestamp(Path(path))
