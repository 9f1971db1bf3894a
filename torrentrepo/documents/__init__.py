"""Collection schemas, typed documents, submission preparation and display views."""

from .display import DocumentView, build_document_view, format_bytes
from .models import (
    DOCUMENT_TYPES,
    BookDocument,
    MalformedDocumentError,
    MovieDocument,
    OtherDocument,
    SoftwareDocument,
    TorrentDocument,
    TvDocument,
    document_from_record,
)
from .prepare import DocumentValidationError, build_document, form_from_magnet, prepare_document_data, validate_document_data
from .schema import COLLECTIONS, DEFAULT_COLLECTION, CollectionSpec, build_contract_definition, resolve_collection

__all__ = [
    "BookDocument",
    "COLLECTIONS",
    "CollectionSpec",
    "DEFAULT_COLLECTION",
    "DOCUMENT_TYPES",
    "DocumentValidationError",
    "DocumentView",
    "MalformedDocumentError",
    "MovieDocument",
    "OtherDocument",
    "SoftwareDocument",
    "TorrentDocument",
    "TvDocument",
    "build_contract_definition",
    "build_document",
    "build_document_view",
    "document_from_record",
    "form_from_magnet",
    "format_bytes",
    "prepare_document_data",
    "resolve_collection",
    "validate_document_data",
]
