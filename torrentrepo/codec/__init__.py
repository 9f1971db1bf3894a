"""Identifier and link codec: base58, contract IDs, infohashes, magnets, typed IDs."""

from .base58 import base58_decode, base58_encode
from .contract_id import derive_contract_id, double_sha256, generate_entropy, sha256
from .errors import CodecError, InvalidCharacter, InvalidInfoHash, InvalidLength
from .infohash import bytes_to_hex, coerce_infohash, hex_to_bytes, is_valid_info_hash
from .magnet import MagnetLink, base32_to_hex, build_magnet_uri, parse_magnet_link
from .trackers import join_trackers, parse_tracker_list, split_stored_trackers
from .typed_ids import TypedId, TypedIdFormat, format_typed_id, parse_typed_id

__all__ = [
    "CodecError",
    "InvalidCharacter",
    "InvalidInfoHash",
    "InvalidLength",
    "MagnetLink",
    "TypedId",
    "TypedIdFormat",
    "base32_to_hex",
    "base58_decode",
    "base58_encode",
    "build_magnet_uri",
    "bytes_to_hex",
    "coerce_infohash",
    "derive_contract_id",
    "double_sha256",
    "format_typed_id",
    "generate_entropy",
    "hex_to_bytes",
    "is_valid_info_hash",
    "join_trackers",
    "parse_magnet_link",
    "parse_tracker_list",
    "parse_typed_id",
    "sha256",
    "split_stored_trackers",
]
