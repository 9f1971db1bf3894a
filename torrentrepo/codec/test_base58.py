from __future__ import annotations

import pytest

from torrentrepo.codec.base58 import base58_decode, base58_encode
from torrentrepo.codec.errors import InvalidCharacter


@pytest.mark.parametrize(
    ("hex_input", "expected"),
    [
        ("", ""),
        ("61", "2g"),
        ("626262", "a3gV"),
        ("636363", "aPEr"),
        ("516b6fcd0f", "ABnLTmg"),
        ("572e4794", "3EFU7m"),
        ("10c8511e", "Rt5zm"),
        ("00000000000000000000", "1111111111"),
    ],
)
def test_base58_encode_matches_bitcoin_vectors(hex_input: str, expected: str) -> None:
    assert base58_encode(bytes.fromhex(hex_input)) == expected
    assert base58_decode(expected) == bytes.fromhex(hex_input)


def test_base58_preserves_leading_zero_bytes() -> None:
    data = b"\x00\x00\x01\xff"
    encoded = base58_encode(data)
    assert encoded.startswith("11")
    assert not encoded.startswith("111")
    assert base58_decode(encoded) == data


@pytest.mark.parametrize("length", [1, 2, 5, 32])
def test_base58_all_zero_input_inverts_exactly(length: int) -> None:
    data = b"\x00" * length
    assert base58_encode(data) == "1" * length
    assert base58_decode(base58_encode(data)) == data


def test_base58_empty_round_trip() -> None:
    assert base58_decode(base58_encode(b"")) == b""


def test_base58_decode_rejects_characters_outside_alphabet() -> None:
    for bad in ("0", "O", "I", "l", "abc+"):
        with pytest.raises(InvalidCharacter):
            base58_decode(bad)


def test_base58_decode_error_names_offending_character() -> None:
    with pytest.raises(InvalidCharacter, match="'0'") as exc_info:
        base58_decode("12340")
    assert exc_info.value.character == "0"
