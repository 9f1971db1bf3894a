"""Base-58 encoding with the Bitcoin alphabet."""

from __future__ import annotations

from torrentrepo.codec.errors import InvalidCharacter

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE = len(BASE58_ALPHABET)
_INDEX = {char: idx for idx, char in enumerate(BASE58_ALPHABET)}


def base58_encode(data: bytes) -> str:
    """Encode bytes as base-58, keeping each leading zero byte as a '1'."""
    data = bytes(data)
    stripped = data.lstrip(b"\x00")
    zeros = len(data) - len(stripped)

    num = int.from_bytes(stripped, "big")
    digits: list[str] = []
    while num > 0:
        num, remainder = divmod(num, _BASE)
        digits.append(BASE58_ALPHABET[remainder])
    return BASE58_ALPHABET[0] * zeros + "".join(reversed(digits))


def base58_decode(text: str) -> bytes:
    """Decode a base-58 string; raises InvalidCharacter on foreign symbols."""
    num = 0
    for char in text:
        value = _INDEX.get(char)
        if value is None:
            raise InvalidCharacter(char)
        num = num * _BASE + value

    stripped = text.lstrip(BASE58_ALPHABET[0])
    zeros = len(text) - len(stripped)
    body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * zeros + body
