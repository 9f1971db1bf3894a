"""Static collection configuration and the data-contract document schemas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from torrentrepo.codec.typed_ids import TYPED_ID_MAX, TYPED_ID_MIN, TypedIdFormat
from torrentrepo.documents.models import DOCUMENT_TYPES, BaseTorrentDocument

TORRENT_NAME_MAX_LENGTH = 256
TITLE_MAX_LENGTH = 63
TRACKERS_MAX_LENGTH = 2048


@dataclass(frozen=True)
class CollectionSpec:
    collection_id: str
    label: str
    search_field: str
    index_field: str
    search_placeholder: str
    index_name: str
    identifier_description: str

    @property
    def document_type(self) -> type[BaseTorrentDocument]:
        return DOCUMENT_TYPES[self.collection_id]

    @property
    def id_format(self) -> TypedIdFormat | None:
        return self.document_type.id_format


COLLECTIONS: dict[str, CollectionSpec] = {
    "movie": CollectionSpec(
        collection_id="movie",
        label="Movies",
        search_field="imdbId",
        index_field="imdbId",
        search_placeholder="Search by IMDB ID (e.g., tt0133093)",
        index_name="byImdbId",
        identifier_description="IMDB numeric ID (e.g., 133093 from tt0133093)",
    ),
    "tv": CollectionSpec(
        collection_id="tv",
        label="TV Shows",
        search_field="seriesImdbId",
        index_field="seriesImdbId",
        search_placeholder="Search by Series IMDB ID (e.g., tt0903747)",
        index_name="bySeriesImdbId",
        identifier_description="IMDB series numeric ID (e.g., 903747 from tt0903747)",
    ),
    "book": CollectionSpec(
        collection_id="book",
        label="Books",
        search_field="workId",
        index_field="workId",
        search_placeholder="Search by Work ID (e.g., OL8483260W)",
        index_name="byWorkId",
        identifier_description="OpenLibrary Work ID numeric part (e.g., 8483260 from OL8483260W)",
    ),
    "iso": CollectionSpec(
        collection_id="iso",
        label="Software",
        search_field="title",
        index_field="title",
        search_placeholder="Search by title...",
        index_name="byTitle",
        identifier_description="Software/ISO name for search",
    ),
    "other": CollectionSpec(
        collection_id="other",
        label="Other",
        search_field="title",
        index_field="title",
        search_placeholder="Search by title...",
        index_name="byTitle",
        identifier_description="Title for search",
    ),
}
DEFAULT_COLLECTION = "movie"


def resolve_collection(collection_id: str | None) -> CollectionSpec:
    normalized = (collection_id or "").strip().lower()
    spec = COLLECTIONS.get(normalized)
    if spec is not None:
        return spec
    supported = ", ".join(COLLECTIONS)
    raise ValueError(f"Unsupported collection '{collection_id}'. Supported collections: {supported}.")


def document_schema(spec: CollectionSpec) -> dict[str, Any]:
    """JSON schema for one collection, as registered with the contract."""
    if spec.id_format is not None:
        identifier: dict[str, Any] = {
            "type": "integer",
            "minimum": TYPED_ID_MIN,
            "maximum": TYPED_ID_MAX,
        }
    else:
        identifier = {"type": "string", "maxLength": TITLE_MAX_LENGTH}
    identifier.update(position=2, description=spec.identifier_description)

    return {
        "type": "object",
        "properties": {
            "infoHash": {
                "type": "array",
                "byteArray": True,
                "minItems": 20,
                "maxItems": 20,
                "position": 0,
                "description": "20-byte raw BitTorrent v1 infohash",
            },
            "torrentName": {"type": "string", "maxLength": TORRENT_NAME_MAX_LENGTH, "position": 1},
            spec.search_field: identifier,
            "trackers": {
                "type": "string",
                "maxLength": TRACKERS_MAX_LENGTH,
                "position": 3,
                "description": "Tracker URLs separated by newline (optional)",
            },
            "sizeBytes": {"type": "integer", "minimum": 0, "position": 4},
        },
        "required": ["infoHash", "torrentName", spec.search_field],
        "additionalProperties": False,
        "indices": [{"name": spec.index_name, "properties": [{spec.index_field: "asc"}]}],
    }


def contract_document_schemas() -> dict[str, dict[str, Any]]:
    return {collection_id: document_schema(spec) for collection_id, spec in COLLECTIONS.items()}


def build_contract_definition(owner_id: str, contract_id: str) -> dict[str, Any]:
    return {
        "$format_version": "0",
        "id": contract_id,
        "ownerId": owner_id,
        "version": 1,
        "config": {
            "$format_version": "0",
            "canBeDeleted": False,
            "readonly": False,
            "keepsHistory": False,
            "documentsKeepHistoryContractDefault": False,
            "documentsMutableContractDefault": False,
            "documentsCanBeDeletedContractDefault": False,
        },
        "documentSchemas": contract_document_schemas(),
    }


def required_fields(collection_id: str) -> list[str]:
    spec = resolve_collection(collection_id)
    return list(document_schema(spec)["required"])
