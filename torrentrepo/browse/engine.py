"""Paginated browsing over the store, one engine per tabbed browsing session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from torrentrepo import logger
from torrentrepo.browse.state import (
    QueryState,
    build_query_options,
    commit_page,
    initial_state,
    plan_clear_search,
    plan_next_page,
    plan_previous_page,
    plan_search,
    record_id,
)
from torrentrepo.config import DEFAULT_PAGE_SIZE
from torrentrepo.documents.models import MalformedDocumentError, TorrentDocument, document_from_record
from torrentrepo.documents.schema import COLLECTIONS, DEFAULT_COLLECTION, CollectionSpec
from torrentrepo.store.protocols import DocumentStore


@dataclass(frozen=True)
class BrowsePage:
    state: QueryState
    records: tuple[Mapping[str, Any], ...] = ()
    documents: tuple[TorrentDocument, ...] = ()
    skipped: int = 0
    fetched: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.records


def decode_records(
    collection_id: str,
    records: Sequence[Mapping[str, Any]],
) -> tuple[tuple[TorrentDocument, ...], int]:
    """Decode what we can; undecodable records are logged and counted."""
    documents: list[TorrentDocument] = []
    skipped = 0
    for record in records:
        try:
            documents.append(document_from_record(collection_id, record))
        except MalformedDocumentError as exc:
            skipped += 1
            logger.get_logger().warning(
                f"Skipping malformed {collection_id} document #{record_id(record) or '?'}: {exc}"
            )
    return tuple(documents), skipped


class QueryEngine:
    """
    Drives keyset-paginated queries for the active collection.

    Each transition plans from the newest requested state, pending or
    committed, issues exactly one store query and commits the pending state
    only when that query is still the latest one issued. Failed queries leave
    the committed state untouched and propagate the store error; superseded
    completions are dropped and return None.
    """

    def __init__(
        self,
        store: DocumentStore,
        contract_id: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        collections: Mapping[str, CollectionSpec] = COLLECTIONS,
        default_collection: str = DEFAULT_COLLECTION,
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.store = store
        self.contract_id = contract_id
        self.page_size = page_size
        self.collections = dict(collections)
        self._state = initial_state(self._resolve(default_collection).collection_id)
        self._latest = self._state
        self._page: BrowsePage | None = None
        self._sequence = 0

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def collection(self) -> CollectionSpec:
        return self.collections[self._state.collection_id]

    @property
    def page(self) -> BrowsePage | None:
        return self._page

    @property
    def has_next_page(self) -> bool:
        return self._state.has_next_page(self.page_size)

    @property
    def has_previous_page(self) -> bool:
        return self._state.has_previous_page

    async def select_collection(self, collection_id: str) -> BrowsePage | None:
        spec = self._resolve(collection_id)
        return await self._run(initial_state(spec.collection_id))

    async def search(self, raw_query: str | None) -> BrowsePage | None:
        collection = self.collections[self._latest.collection_id]
        return await self._run(plan_search(self._latest, collection, raw_query))

    async def clear_search(self) -> BrowsePage | None:
        return await self._run(plan_clear_search(self._latest))

    async def next_page(self) -> BrowsePage | None:
        pending = plan_next_page(self._latest, self.page_size)
        if pending is None:
            return self._unchanged_page()
        return await self._run(pending)

    async def previous_page(self) -> BrowsePage | None:
        pending = plan_previous_page(self._latest)
        if pending is None:
            return self._unchanged_page()
        return await self._run(pending)

    async def refresh(self) -> BrowsePage | None:
        return await self._run(self._latest)

    def _resolve(self, collection_id: str) -> CollectionSpec:
        key = (collection_id or "").strip().lower()
        spec = self.collections.get(key)
        if spec is None:
            supported = ", ".join(self.collections)
            raise ValueError(f"Unsupported collection '{collection_id}'. Supported collections: {supported}.")
        return spec

    def _unchanged_page(self) -> BrowsePage:
        if self._page is not None:
            return BrowsePage(
                state=self._page.state,
                records=self._page.records,
                documents=self._page.documents,
                skipped=self._page.skipped,
                fetched=False,
            )
        return BrowsePage(state=self._state, fetched=False)

    async def _run(self, pending: QueryState) -> BrowsePage | None:
        self._sequence += 1
        sequence = self._sequence
        self._latest = pending
        spec = self.collections[pending.collection_id]
        options = build_query_options(pending, spec, self.page_size)
        log = logger.get_logger()
        log.debug(
            f"Query #{sequence}: {spec.collection_id} page {pending.page_number} "
            f"(startAfter={pending.current_cursor}, filter={pending.filter})"
        )

        try:
            records = await self.store.query(self.contract_id, spec.collection_id, options)
        except Exception as exc:
            if sequence != self._sequence:
                log.debug(f"Query #{sequence} failed after being superseded; ignoring: {exc}")
                return None
            self._latest = self._state
            raise

        if sequence != self._sequence:
            log.debug(f"Query #{sequence} superseded by #{self._sequence}; dropping {len(records)} records")
            return None

        records = tuple(records)
        documents, skipped = decode_records(spec.collection_id, records)
        self._state = commit_page(pending, records)
        self._latest = self._state
        self._page = BrowsePage(
            state=self._state,
            records=records,
            documents=documents,
            skipped=skipped,
        )
        return self._page
