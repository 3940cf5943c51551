"""Detect whether a PGP key file is raw or ASCII-armored."""

from __future__ import annotations

from enum import Enum
from typing import BinaryIO

from .exceptions import TruncatedKeyError

# Start of "-----BEGIN PGP PUBLIC KEY BLOCK-----" and friends
ARMOR_PREFIX = b"-----"


class KeyEncoding(Enum):
    """On-disk encoding of a PGP key file."""

    RAW = "raw"  # Binary OpenPGP packets
    ARMORED = "armored"  # Base64 body wrapped in BEGIN/END lines


def detect_encoding(stream: BinaryIO, buffer: bytearray | None = None) -> KeyEncoding:
    """Classify a key stream by its first bytes.

    Reads exactly ``len(ARMOR_PREFIX)`` bytes, leaving the cursor just past
    them. Raw keys must be repositioned by the caller; the armored scan
    continues from here.

    Args:
        stream: Binary stream positioned at offset 0.
        buffer: Reusable buffer of ``len(ARMOR_PREFIX)`` bytes.

    Returns:
        Detected encoding.

    Raises:
        TruncatedKeyError: The stream is shorter than the armor prefix.

    """
    if buffer is None:
        buffer = bytearray(len(ARMOR_PREFIX))

    got = stream.readinto(buffer) or 0
    if got < len(ARMOR_PREFIX):
        raise TruncatedKeyError(
            "Key too short to detect encoding",
            expected=len(ARMOR_PREFIX),
            got=got,
        )

    if buffer == ARMOR_PREFIX:
        return KeyEncoding.ARMORED
    return KeyEncoding.RAW
