"""Hash primitives and deterministic data-contract ID derivation."""

from __future__ import annotations

import hashlib
import secrets

from torrentrepo.codec.base58 import base58_decode, base58_encode
from torrentrepo.codec.errors import InvalidLength

ENTROPY_SIZE = 32


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(bytes(data)).digest()


def double_sha256(data: bytes) -> bytes:
    return sha256(sha256(data))


def generate_entropy() -> bytes:
    """Return 32 random bytes suitable for contract or document creation."""
    return secrets.token_bytes(ENTROPY_SIZE)


def derive_contract_id(owner_id: str, entropy: bytes) -> str:
    """
    Derive a contract ID as base58(sha256(sha256(owner_id_bytes + entropy))).

    The result must match what any other party derives from the same inputs,
    since the store assigns its own value independently.
    """
    entropy = bytes(entropy)
    if len(entropy) != ENTROPY_SIZE:
        raise InvalidLength("entropy", ENTROPY_SIZE, len(entropy))
    owner_bytes = base58_decode(owner_id)
    return base58_encode(double_sha256(owner_bytes + entropy))
