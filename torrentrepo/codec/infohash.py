"""Fixed-length infohash conversions between raw bytes and hex."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Any

from torrentrepo.codec.errors import InvalidCharacter, InvalidInfoHash, InvalidLength

INFOHASH_SIZE = 20
INFOHASH_HEX_LENGTH = INFOHASH_SIZE * 2

_HEX_RE = re.compile(r"^[0-9a-fA-F]{40}$")


def hex_to_bytes(hex_string: str) -> bytes:
    if len(hex_string) != INFOHASH_HEX_LENGTH:
        raise InvalidLength("hex string length", INFOHASH_HEX_LENGTH, len(hex_string))
    for char in hex_string:
        if char not in "0123456789abcdefABCDEF":
            raise InvalidCharacter(char, alphabet="hex")
    return bytes.fromhex(hex_string)


def bytes_to_hex(data: bytes | bytearray | list[int]) -> str:
    raw = bytes(data)
    if len(raw) != INFOHASH_SIZE:
        raise InvalidLength("infohash byte length", INFOHASH_SIZE, len(raw))
    return raw.hex()


def is_valid_info_hash(value: object) -> bool:
    if isinstance(value, str):
        return bool(_HEX_RE.match(value))
    if isinstance(value, (bytes, bytearray)):
        return len(value) == INFOHASH_SIZE
    return False


def coerce_infohash(value: Any) -> bytes:
    """
    Turn a wire infohash into 20 raw bytes.

    Records carry the hash as an int array, raw bytes, a hex string, or a
    base64 string depending on which client serialized them.
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, list):
        try:
            raw = bytes(value)
        except (TypeError, ValueError) as exc:
            raise InvalidInfoHash(f"infohash array is not a byte array: {exc}") from exc
    elif isinstance(value, str):
        if _HEX_RE.match(value):
            return bytes.fromhex(value)
        try:
            raw = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidInfoHash(f"infohash string is neither hex nor base64: {value!r}") from exc
    else:
        raise InvalidInfoHash(f"unsupported infohash type '{type(value).__name__}'")

    if len(raw) != INFOHASH_SIZE:
        raise InvalidInfoHash(f"infohash must be {INFOHASH_SIZE} bytes, got {len(raw)}")
    return raw
