"""
Keyset pagination state for one collection tab.

Every transition is a pure function from one QueryState to the next; the
engine commits the pending state only after the store answers.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Sequence

from torrentrepo.codec.typed_ids import format_typed_id, parse_typed_id
from torrentrepo.documents.schema import CollectionSpec
from torrentrepo.store.types import QueryOptions

EQUALS = "=="
STARTS_WITH = "startsWith"


class InvalidSearchTerm(ValueError):
    """Raised when a search term cannot be turned into a filter for the collection."""

    def __init__(self, collection: CollectionSpec, term: str) -> None:
        example = format_typed_id(133093, collection.id_format) if collection.id_format else "a title"
        super().__init__(
            f"'{term}' is not a valid {collection.search_field} for {collection.label} (e.g., {example})"
        )
        self.term = term
        self.collection_id = collection.collection_id


@dataclass(frozen=True)
class QueryFilter:
    field: str
    operator: str
    value: Any

    def as_clause(self) -> tuple[str, str, Any]:
        return (self.field, self.operator, self.value)


@dataclass(frozen=True)
class QueryState:
    collection_id: str
    filter: QueryFilter | None = None
    page_number: int = 1
    cursor_stack: tuple[str | None, ...] = ()
    current_cursor: str | None = None
    last_page_size: int = 0
    last_record_id: str | None = None

    @property
    def is_filtered(self) -> bool:
        return self.filter is not None

    def has_next_page(self, page_size: int) -> bool:
        return self.last_page_size >= page_size and self.last_record_id is not None

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1


def initial_state(collection_id: str) -> QueryState:
    return QueryState(collection_id=collection_id)


def build_filter(collection: CollectionSpec, raw_query: str) -> QueryFilter:
    term = raw_query.strip()
    if collection.id_format is None:
        return QueryFilter(collection.search_field, STARTS_WITH, term)
    value = parse_typed_id(term, collection.id_format)
    if value is None:
        raise InvalidSearchTerm(collection, term)
    return QueryFilter(collection.search_field, EQUALS, value)


def plan_clear_search(state: QueryState) -> QueryState:
    return initial_state(state.collection_id)


def plan_search(state: QueryState, collection: CollectionSpec, raw_query: str | None) -> QueryState:
    if not raw_query or not raw_query.strip():
        return plan_clear_search(state)
    return QueryState(collection_id=state.collection_id, filter=build_filter(collection, raw_query))


def plan_next_page(state: QueryState, page_size: int) -> QueryState | None:
    """None when the current page was short or empty, so there is nothing after it."""
    if not state.has_next_page(page_size):
        return None
    return replace(
        state,
        page_number=state.page_number + 1,
        cursor_stack=state.cursor_stack + (state.current_cursor,),
        current_cursor=state.last_record_id,
        last_page_size=0,
        last_record_id=None,
    )


def plan_previous_page(state: QueryState) -> QueryState | None:
    if state.page_number <= 1 or not state.cursor_stack:
        return None
    return replace(
        state,
        page_number=state.page_number - 1,
        cursor_stack=state.cursor_stack[:-1],
        current_cursor=state.cursor_stack[-1],
        last_page_size=0,
        last_record_id=None,
    )


def build_query_options(state: QueryState, collection: CollectionSpec, page_size: int) -> QueryOptions:
    return QueryOptions(
        limit=page_size,
        order_by=((collection.index_field, "asc"),),
        where=(state.filter.as_clause(),) if state.filter is not None else (),
        start_after=state.current_cursor,
    )


def record_id(record: Mapping[str, Any]) -> str | None:
    value = record.get("$id") or record.get("id")
    return str(value) if value else None


def commit_page(pending: QueryState, records: Sequence[Mapping[str, Any]]) -> QueryState:
    return replace(
        pending,
        last_page_size=len(records),
        last_record_id=record_id(records[-1]) if records else None,
    )
