"""Typed torrent documents: one dataclass per collection, decoded from wire records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Union

from torrentrepo.codec.errors import InvalidInfoHash
from torrentrepo.codec.infohash import bytes_to_hex, coerce_infohash
from torrentrepo.codec.trackers import split_stored_trackers
from torrentrepo.codec.typed_ids import TypedIdFormat, parse_typed_id


class MalformedDocumentError(ValueError):
    """Raised when a store record cannot be decoded into a typed document."""


@dataclass(frozen=True, kw_only=True)
class BaseTorrentDocument:
    collection: ClassVar[str] = ""
    identifier_field: ClassVar[str] = ""
    identifier_attr: ClassVar[str] = ""
    id_format: ClassVar[TypedIdFormat | None] = None

    info_hash: bytes
    torrent_name: str
    trackers: str = ""
    size_bytes: int | None = None
    document_id: str | None = None
    owner_id: str | None = None

    @property
    def info_hash_hex(self) -> str:
        return bytes_to_hex(self.info_hash)

    @property
    def tracker_list(self) -> list[str]:
        return split_stored_trackers(self.trackers)

    @property
    def identifier(self) -> int | str:
        return getattr(self, self.identifier_attr)

    def to_wire(self) -> dict[str, Any]:
        """Return the data payload in the store's field names."""
        data: dict[str, Any] = {
            "infoHash": list(self.info_hash),
            "torrentName": self.torrent_name,
            self.identifier_field: self.identifier,
        }
        if self.trackers:
            data["trackers"] = self.trackers
        if self.size_bytes is not None:
            data["sizeBytes"] = self.size_bytes
        return data


@dataclass(frozen=True, kw_only=True)
class MovieDocument(BaseTorrentDocument):
    collection: ClassVar[str] = "movie"
    identifier_field: ClassVar[str] = "imdbId"
    identifier_attr: ClassVar[str] = "imdb_id"
    id_format: ClassVar[TypedIdFormat | None] = TypedIdFormat.IMDB

    imdb_id: int


@dataclass(frozen=True, kw_only=True)
class TvDocument(BaseTorrentDocument):
    collection: ClassVar[str] = "tv"
    identifier_field: ClassVar[str] = "seriesImdbId"
    identifier_attr: ClassVar[str] = "series_imdb_id"
    id_format: ClassVar[TypedIdFormat | None] = TypedIdFormat.IMDB

    series_imdb_id: int


@dataclass(frozen=True, kw_only=True)
class BookDocument(BaseTorrentDocument):
    collection: ClassVar[str] = "book"
    identifier_field: ClassVar[str] = "workId"
    identifier_attr: ClassVar[str] = "work_id"
    id_format: ClassVar[TypedIdFormat | None] = TypedIdFormat.OPENLIBRARY_WORK

    work_id: int


@dataclass(frozen=True, kw_only=True)
class SoftwareDocument(BaseTorrentDocument):
    collection: ClassVar[str] = "iso"
    identifier_field: ClassVar[str] = "title"
    identifier_attr: ClassVar[str] = "title"

    title: str


@dataclass(frozen=True, kw_only=True)
class OtherDocument(BaseTorrentDocument):
    collection: ClassVar[str] = "other"
    identifier_field: ClassVar[str] = "title"
    identifier_attr: ClassVar[str] = "title"

    title: str


TorrentDocument = Union[MovieDocument, TvDocument, BookDocument, SoftwareDocument, OtherDocument]

DOCUMENT_TYPES: dict[str, type[BaseTorrentDocument]] = {
    cls.collection: cls
    for cls in (MovieDocument, TvDocument, BookDocument, SoftwareDocument, OtherDocument)
}


def record_data(record: Mapping[str, Any]) -> Mapping[str, Any]:
    """Document fields live either at the top level or under 'data'."""
    data = record.get("data")
    return data if isinstance(data, Mapping) else record


def _optional_size(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise MalformedDocumentError(f"Malformed document: sizeBytes expected integer, got {value!r}")
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise MalformedDocumentError(f"Malformed document: sizeBytes expected integer, got {value!r}")
    if size < 0:
        raise MalformedDocumentError(f"Malformed document: sizeBytes must be >= 0, got {size}")
    return size


def _identifier(cls: type[BaseTorrentDocument], data: Mapping[str, Any]) -> int | str:
    raw = data.get(cls.identifier_field)
    if cls.id_format is not None:
        parsed = parse_typed_id(raw, cls.id_format)
        if parsed is None:
            raise MalformedDocumentError(
                f"Malformed {cls.collection} document: '{cls.identifier_field}' is missing or invalid ({raw!r})"
            )
        return parsed
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedDocumentError(
            f"Malformed {cls.collection} document: '{cls.identifier_field}' is required"
        )
    return raw


def document_from_record(collection_id: str, record: Mapping[str, Any]) -> TorrentDocument:
    """Decode a raw store record into the collection's document variant."""
    cls = DOCUMENT_TYPES.get(collection_id)
    if cls is None:
        raise ValueError(f"Unsupported collection '{collection_id}'")

    data = record_data(record)
    raw_hash = data.get("infoHash")
    if raw_hash is None:
        raise MalformedDocumentError(f"Malformed {collection_id} document: missing infoHash")
    try:
        info_hash = coerce_infohash(raw_hash)
    except InvalidInfoHash as exc:
        raise MalformedDocumentError(f"Malformed {collection_id} document: {exc}") from exc

    torrent_name = data.get("torrentName")
    if not isinstance(torrent_name, str) or not torrent_name:
        raise MalformedDocumentError(f"Malformed {collection_id} document: missing torrentName")

    trackers = data.get("trackers") or ""
    if not isinstance(trackers, str):
        raise MalformedDocumentError(f"Malformed {collection_id} document: trackers must be a string")

    document_id = record.get("$id") or record.get("id")
    owner_id = record.get("$ownerId") or record.get("ownerId")
    return cls(  # type: ignore[return-value]
        info_hash=info_hash,
        torrent_name=torrent_name,
        trackers=trackers,
        size_bytes=_optional_size(data.get("sizeBytes")),
        document_id=str(document_id) if document_id else None,
        owner_id=str(owner_id) if owner_id else None,
        **{cls.identifier_attr: _identifier(cls, data)},
    )
