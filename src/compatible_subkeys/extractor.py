"""Extract the creation timestamp from raw and ASCII-armored PGP keys.

Only the first packet is touched. For a version 4 key packet written with
a one-octet length header (GnuPG and Sequoia use it for ed25519 keys) the
layout is::

    offset 0  packet tag
    offset 1  packet length
    offset 2  key version (4)
    offset 3  creation time, 4 octets, big endian

Nothing else in the packet is parsed or validated.
"""

from __future__ import annotations

import base64
import binascii
import io
from typing import BinaryIO

from .exceptions import DearmorError, KeySeekError, TruncatedKeyError

RAW_TIMESTAMP_OFFSET = 3
TIMESTAMP_SIZE = 4

# Body line width used by GnuPG and Sequoia PGP
ARMOR_LINE_LENGTH = 64

# Line + newline + one extra byte so overlong lines never look complete
ARMOR_READ_LIMIT = ARMOR_LINE_LENGTH + 2

# 4 base64 chars decode to 3 octets, so octet 3 starts at char 4
TIMESTAMP_B64_OFFSET = 4

# 6 chars carry octets 3..6; two "=" pads make a strictly valid slice
TIMESTAMP_B64_CHARS = 6
TIMESTAMP_B64_SLICE = TIMESTAMP_B64_CHARS + 2


def read_raw_timestamp(stream: BinaryIO, out: bytearray) -> None:
    """Read the big-endian timestamp field of a binary key packet.

    Args:
        stream: Seekable binary stream of the key file.
        out: Buffer of ``TIMESTAMP_SIZE`` bytes receiving the raw field.

    Raises:
        KeySeekError: Repositioning to the field failed.
        TruncatedKeyError: The file ends inside the field.

    """
    try:
        stream.seek(RAW_TIMESTAMP_OFFSET, io.SEEK_SET)
    except (OSError, ValueError) as e:
        raise KeySeekError(f"Cannot seek to offset {RAW_TIMESTAMP_OFFSET}: {e}") from e

    got = stream.readinto(out) or 0
    if got < TIMESTAMP_SIZE:
        raise TruncatedKeyError(
            "Key ends before the creation timestamp",
            expected=TIMESTAMP_SIZE,
            got=got,
        )


def is_timestamp_line(line: bytes) -> bool:
    """Check if an armor line is the first full line of the base64 body.

    Armor headers and footers contain "-", header fields such as
    "Comment:" contain ":", and neither can appear in base64. A body line
    is exactly ``ARMOR_LINE_LENGTH`` characters plus a newline.

    """
    if b"-" in line or b":" in line:
        return False
    return len(line) == ARMOR_LINE_LENGTH + 1


def decode_timestamp_slice(line: bytes, out: bytearray, scratch: bytearray) -> None:
    """Decode the timestamp octets from the first body line.

    Copies the six characters that cover the field into ``scratch``, pads
    them with "==" and decodes straight into ``out``. The line itself is
    left untouched.

    Args:
        line: First full body line of the armor.
        out: Buffer of ``TIMESTAMP_SIZE`` bytes receiving the raw field.
        scratch: Buffer of ``TIMESTAMP_B64_SLICE`` bytes.

    Raises:
        DearmorError: The slice is not valid base64.

    """
    end = TIMESTAMP_B64_OFFSET + TIMESTAMP_B64_CHARS
    scratch[:TIMESTAMP_B64_CHARS] = line[TIMESTAMP_B64_OFFSET:end]
    scratch[TIMESTAMP_B64_CHARS:] = b"=="

    try:
        decoded = base64.b64decode(scratch, validate=True)
    except binascii.Error as e:
        raise DearmorError(f"Invalid base64 in timestamp slice: {e}") from e

    out[:TIMESTAMP_SIZE] = decoded


def read_armored_timestamp(
    stream: BinaryIO,
    out: bytearray,
    scratch: bytearray | None = None,
) -> None:
    """Scan armor lines and decode the timestamp from the first body line.

    Reading stops at the first qualifying line; the rest of the file is
    never read.

    Args:
        stream: Binary stream, anywhere before the first body line.
        out: Buffer of ``TIMESTAMP_SIZE`` bytes receiving the raw field.
        scratch: Reusable buffer of ``TIMESTAMP_B64_SLICE`` bytes.

    Raises:
        DearmorError: No qualifying line, or the slice does not decode.

    """
    if scratch is None:
        scratch = bytearray(TIMESTAMP_B64_SLICE)

    while line := stream.readline(ARMOR_READ_LIMIT):
        if not is_timestamp_line(line):
            continue

        decode_timestamp_slice(line, out, scratch)
        return

    raise DearmorError(
        f"No {ARMOR_LINE_LENGTH}-character base64 line found",
    )
