"""Turn raw form input into validated document payloads for submission."""

from __future__ import annotations

from typing import Any, Mapping

from torrentrepo.codec.infohash import INFOHASH_SIZE, hex_to_bytes, is_valid_info_hash
from torrentrepo.codec.magnet import parse_magnet_link
from torrentrepo.codec.trackers import join_trackers, parse_tracker_list
from torrentrepo.codec.typed_ids import parse_typed_id
from torrentrepo.documents.models import TorrentDocument, document_from_record
from torrentrepo.documents.schema import (
    TITLE_MAX_LENGTH,
    TORRENT_NAME_MAX_LENGTH,
    TRACKERS_MAX_LENGTH,
    resolve_collection,
)

_IDENTIFIER_EXAMPLES = {
    "imdbId": "IMDB ID is required (e.g., tt0133093)",
    "seriesImdbId": "Series IMDB ID is required (e.g., tt0903747)",
    "workId": "OpenLibrary Work ID is required (e.g., OL8483260W)",
    "title": "Title is required",
}


class DocumentValidationError(ValueError):
    """Raised when prepared document data fails validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Validation failed:\n- " + "\n- ".join(errors))
        self.errors = errors


def _text(form: Mapping[str, Any], key: str) -> str:
    value = form.get(key)
    return value.strip() if isinstance(value, str) else ""


def form_from_magnet(magnet_uri: str) -> dict[str, str]:
    """Pre-fill infoHash, torrentName and trackers form fields from a magnet link."""
    parsed = parse_magnet_link(magnet_uri)
    form: dict[str, str] = {}
    if parsed.info_hash:
        form["infoHash"] = parsed.info_hash
    if parsed.display_name:
        form["torrentName"] = parsed.display_name
    if parsed.trackers:
        form["trackers"] = parsed.trackers
    return form


def prepare_document_data(collection_id: str, form: Mapping[str, Any]) -> dict[str, Any]:
    """
    Convert raw form values into the store's wire types.

    Hex infohashes become 20-int arrays, display IDs become integers, tracker
    text becomes the newline-joined stored form. Unconvertible fields are
    left out, except size values, which pass through unchanged; either way
    validate_document_data reports them.
    """
    spec = resolve_collection(collection_id)
    data: dict[str, Any] = {}

    info_hash = _text(form, "infoHash")
    if is_valid_info_hash(info_hash):
        data["infoHash"] = list(hex_to_bytes(info_hash))

    torrent_name = _text(form, "torrentName")
    if torrent_name:
        data["torrentName"] = torrent_name

    trackers = parse_tracker_list(form.get("trackers"))
    if trackers:
        data["trackers"] = join_trackers(trackers)

    if spec.id_format is not None:
        identifier = parse_typed_id(form.get(spec.search_field), spec.id_format)
        if identifier is not None:
            data[spec.search_field] = identifier
    else:
        title = _text(form, spec.search_field)
        if title:
            data[spec.search_field] = title

    size = form.get("sizeBytes")
    if isinstance(size, str):
        size = size.strip()
        if size.isascii() and size.isdigit():
            size = int(size)
    if size is not None and size != "":
        data["sizeBytes"] = size

    return data


def validate_document_data(collection_id: str, data: Mapping[str, Any]) -> list[str]:
    """Return a list of human-readable problems; empty means valid."""
    spec = resolve_collection(collection_id)
    errors: list[str] = []

    info_hash = data.get("infoHash")
    if not isinstance(info_hash, list) or len(info_hash) != INFOHASH_SIZE:
        errors.append("Invalid or missing infoHash (must be 40-char hex)")

    torrent_name = data.get("torrentName")
    if not torrent_name:
        errors.append("Torrent name is required")
    elif len(torrent_name) > TORRENT_NAME_MAX_LENGTH:
        errors.append(f"Torrent name exceeds {TORRENT_NAME_MAX_LENGTH} characters")

    identifier = data.get(spec.search_field)
    if identifier is None or identifier == "":
        errors.append(_IDENTIFIER_EXAMPLES[spec.search_field])
    elif spec.id_format is None and len(identifier) > TITLE_MAX_LENGTH:
        errors.append(f"Title exceeds {TITLE_MAX_LENGTH} characters")

    trackers = data.get("trackers")
    if trackers and len(trackers) > TRACKERS_MAX_LENGTH:
        errors.append(f"Tracker list exceeds {TRACKERS_MAX_LENGTH} characters")

    size = data.get("sizeBytes")
    if size is not None and (not isinstance(size, int) or isinstance(size, bool) or size < 0):
        errors.append("Size must be a non-negative integer")

    return errors


def build_document(collection_id: str, form: Mapping[str, Any]) -> TorrentDocument:
    """Prepare and validate form input; raise DocumentValidationError on problems."""
    data = prepare_document_data(collection_id, form)
    errors = validate_document_data(collection_id, data)
    if errors:
        raise DocumentValidationError(errors)
    return document_from_record(collection_id, data)
