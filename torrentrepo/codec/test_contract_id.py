from __future__ import annotations

import pytest

from torrentrepo.codec.base58 import base58_decode, base58_encode
from torrentrepo.codec.contract_id import (
    ENTROPY_SIZE,
    derive_contract_id,
    double_sha256,
    generate_entropy,
    sha256,
)
from torrentrepo.codec.errors import InvalidCharacter, InvalidLength

OWNER_ID = "2UGyMaAc1bhk92gkvcpDLC4YvSd5q3SLhEZ1Vc4nqjwk"


def test_sha256_of_empty_input() -> None:
    assert sha256(b"").hex() == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_double_sha256_of_empty_input() -> None:
    assert double_sha256(b"").hex() == "5df6e0e2761359d30a8275058e299fcc0381534545f55cf43e41983f5d4c9456"


def test_derive_contract_id_is_base58_of_double_hash() -> None:
    entropy = bytes(range(32))
    expected = base58_encode(double_sha256(base58_decode(OWNER_ID) + entropy))

    assert derive_contract_id(OWNER_ID, entropy) == expected
    assert derive_contract_id(OWNER_ID, bytearray(entropy)) == expected


def test_derive_contract_id_depends_on_entropy() -> None:
    first = derive_contract_id(OWNER_ID, b"\x01" * 32)
    second = derive_contract_id(OWNER_ID, b"\x02" * 32)
    assert first != second
    assert len(base58_decode(first)) == 32


def test_derive_contract_id_rejects_short_entropy() -> None:
    with pytest.raises(InvalidLength):
        derive_contract_id(OWNER_ID, b"\x00" * 31)


def test_derive_contract_id_rejects_bad_owner_id() -> None:
    with pytest.raises(InvalidCharacter):
        derive_contract_id("not-base58-0OIl", b"\x00" * 32)


def test_generate_entropy_returns_fresh_32_bytes() -> None:
    first = generate_entropy()
    second = generate_entropy()
    assert len(first) == ENTROPY_SIZE
    assert first != second
