"""Display-ready views of torrent documents."""

from __future__ import annotations

from dataclasses import dataclass

from torrentrepo.codec.magnet import build_magnet_uri
from torrentrepo.codec.typed_ids import TypedId
from torrentrepo.documents.models import TorrentDocument

_IDENTIFIER_LABELS = {
    "imdbId": "IMDB",
    "seriesImdbId": "Series",
    "workId": "Work ID",
    "title": "Title",
}
_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


@dataclass(frozen=True)
class DocumentView:
    document_id: str | None
    torrent_name: str
    info_hash_hex: str
    magnet_uri: str
    meta_items: tuple[tuple[str, str], ...]


def format_bytes(size: int | None) -> str:
    if not size or size <= 0:
        return "Unknown"
    value = float(size)
    unit_index = 0
    while value >= 1024 and unit_index < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    return f"{value:.2f} {_SIZE_UNITS[unit_index]}"


def format_identifier(document: TorrentDocument) -> str:
    if document.id_format is None:
        return str(document.identifier)
    return str(TypedId(int(document.identifier), document.id_format))


def build_document_view(document: TorrentDocument) -> DocumentView:
    meta: list[tuple[str, str]] = [
        (_IDENTIFIER_LABELS[document.identifier_field], format_identifier(document)),
    ]
    if document.size_bytes:
        meta.append(("Size", format_bytes(document.size_bytes)))
    tracker_count = len(document.tracker_list)
    if tracker_count:
        meta.append(("Trackers", str(tracker_count)))

    return DocumentView(
        document_id=document.document_id,
        torrent_name=document.torrent_name,
        info_hash_hex=document.info_hash_hex,
        magnet_uri=build_magnet_uri(document.info_hash, document.torrent_name, document.trackers),
        meta_items=tuple(meta),
    )
