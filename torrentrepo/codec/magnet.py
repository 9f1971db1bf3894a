"""Magnet URI parsing and construction for BitTorrent v1 infohashes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable
from urllib.parse import quote, unquote

from torrentrepo.codec.errors import InvalidInfoHash
from torrentrepo.codec.infohash import INFOHASH_SIZE, bytes_to_hex, is_valid_info_hash
from torrentrepo.codec.trackers import split_stored_trackers

BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"

_HEX_BTIH_RE = re.compile(r"urn:btih:([0-9a-fA-F]{40})(?![0-9A-Za-z])", re.IGNORECASE)
_BASE32_BTIH_RE = re.compile(r"urn:btih:([A-Za-z2-7]{32})(?![0-9A-Za-z])", re.IGNORECASE)
_DN_RE = re.compile(r"[?&]dn=([^&]+)")
_TR_RE = re.compile(r"[?&]tr=([^&]+)")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9a-fA-F]{2})")

# encodeURIComponent leaves these unescaped in addition to alphanumerics and "-_.~"
_URI_COMPONENT_SAFE = "!*'()"


@dataclass(frozen=True)
class MagnetLink:
    info_hash: str | None = None
    display_name: str | None = None
    trackers: str = ""

    @property
    def tracker_list(self) -> list[str]:
        return split_stored_trackers(self.trackers)

    def is_empty(self) -> bool:
        return self.info_hash is None and self.display_name is None and not self.trackers


def base32_to_hex(text: str) -> str:
    """Repack base-32 symbols (5 bits each) into hex nibbles, dropping leftovers."""
    bits = "".join(
        f"{BASE32_ALPHABET.index(char):05b}" for char in text.upper() if char in BASE32_ALPHABET
    )
    return "".join(f"{int(bits[i:i + 4], 2):x}" for i in range(0, len(bits) - 3, 4))


def _percent_decode(value: str) -> str:
    if _BAD_ESCAPE_RE.search(value):
        raise ValueError(f"malformed percent escape in {value!r}")
    return unquote(value, errors="strict")


def _encode_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def parse_magnet_link(uri: object) -> MagnetLink:
    """
    Extract infohash, display name and trackers from a magnet URI.

    Never raises: unusable input yields an empty MagnetLink, and individual
    tracker values that fail to decode are skipped.
    """
    if not isinstance(uri, str):
        return MagnetLink()
    uri = uri.strip()
    if not uri.lower().startswith("magnet:?"):
        return MagnetLink()

    hex_match = _HEX_BTIH_RE.search(uri)
    if hex_match:
        info_hash = hex_match.group(1).lower()
    else:
        base32_match = _BASE32_BTIH_RE.search(uri)
        if not base32_match:
            return MagnetLink()
        info_hash = base32_to_hex(base32_match.group(1))

    display_name: str | None = None
    dn_match = _DN_RE.search(uri)
    if dn_match:
        try:
            display_name = _percent_decode(dn_match.group(1).replace("+", " "))
        except ValueError:
            display_name = None

    trackers: list[str] = []
    for match in _TR_RE.finditer(uri):
        try:
            trackers.append(_percent_decode(match.group(1)))
        except ValueError:
            continue

    return MagnetLink(info_hash=info_hash, display_name=display_name, trackers="\n".join(trackers))


def _info_hash_hex(info_hash: object) -> str:
    if isinstance(info_hash, (bytes, bytearray)):
        if len(info_hash) != INFOHASH_SIZE:
            raise InvalidInfoHash(f"infohash must be {INFOHASH_SIZE} bytes, got {len(info_hash)}")
        return bytes_to_hex(info_hash)
    if isinstance(info_hash, str):
        if not is_valid_info_hash(info_hash):
            raise InvalidInfoHash(f"infohash must be 40 hex characters, got {info_hash!r}")
        return info_hash.lower()
    raise InvalidInfoHash(f"unsupported infohash type '{type(info_hash).__name__}'")


def build_magnet_uri(
    info_hash: bytes | str,
    display_name: str | None = None,
    trackers: str | Iterable[str] | None = "",
) -> str:
    magnet = f"magnet:?xt=urn:btih:{_info_hash_hex(info_hash)}"
    if display_name:
        magnet += f"&dn={_encode_component(display_name)}"

    if isinstance(trackers, str):
        tracker_list = split_stored_trackers(trackers)
    else:
        tracker_list = [t.strip() for t in trackers or () if t and t.strip()]
    for tracker in tracker_list:
        magnet += f"&tr={_encode_component(tracker)}"
    return magnet
