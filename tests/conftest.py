"""Shared fixtures: synthetic raw and ASCII-armored PGP keys."""

from __future__ import annotations

import base64
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

# OID of Ed25519 as used in OpenPGP (1.3.6.1.4.1.11591.15.1)
_ED25519_OID = bytes.fromhex("2b06010401da470f01")


def crc24(data: bytes) -> int:
    """Compute the OpenPGP armor checksum."""
    crc = 0xB704CE
    for byte in data:
        crc ^= byte << 16
        for _ in range(8):
            crc <<= 1
            if crc & 0x1000000:
                crc ^= 0x1864CFB
    return crc & 0xFFFFFF


def build_raw_key(timestamp: int, user_id: bytes = b"Vanity <vanity@example.org>") -> bytes:
    """Build a v4 Ed25519 public key packet followed by a user ID packet."""
    body = (
        b"\x04"
        + timestamp.to_bytes(4, "big")
        + b"\x16"
        + bytes([len(_ED25519_OID)])
        + _ED25519_OID
        + b"\x01\x07"
        + b"\x40"
        + bytes(range(32))
    )
    # Old-format packet tags with one-octet lengths: 6 (public key), 13 (user ID)
    return b"\x98" + bytes([len(body)]) + body + b"\xb4" + bytes([len(user_id)]) + user_id


def build_armored_key(
    packet: bytes,
    *,
    headers: Sequence[str] = (),
    block: str = "PUBLIC KEY",
    width: int = 64,
    newline: str = "\n",
) -> bytes:
    """Wrap raw packets in ASCII armor."""
    body = base64.b64encode(packet).decode()
    checksum = base64.b64encode(crc24(packet).to_bytes(3, "big")).decode()
    lines = [
        f"-----BEGIN PGP {block} BLOCK-----",
        *headers,
        "",
        *(body[i : i + width] for i in range(0, len(body), width)),
        f"={checksum}",
        f"-----END PGP {block} BLOCK-----",
    ]
    return (newline.join(lines) + newline).encode()


@pytest.fixture
def raw_key() -> Callable[..., bytes]:
    """Factory for raw key bytes with a given timestamp."""
    return build_raw_key


@pytest.fixture
def armored_key() -> Callable[..., bytes]:
    """Factory for armored key bytes with a given timestamp."""

    def _factory(timestamp: int, **kwargs: object) -> bytes:
        return build_armored_key(build_raw_key(timestamp), **kwargs)  # type: ignore[arg-type]

    return _factory


@pytest.fixture
def write_key(tmp_path: Path) -> Callable[[str, bytes], Path]:
    """Factory that writes key bytes into a ``keys`` directory."""
    keys_dir = tmp_path / "keys"
    keys_dir.mkdir()

    def _write(name: str, data: bytes) -> Path:
        path = keys_dir / name
        path.write_bytes(data)
        return path

    return _write
