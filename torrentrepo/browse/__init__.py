"""Cursor-paginated browsing and search across the torrent collections."""

from .engine import BrowsePage, QueryEngine, decode_records
from .state import (
    InvalidSearchTerm,
    QueryFilter,
    QueryState,
    build_filter,
    build_query_options,
    commit_page,
    initial_state,
    plan_clear_search,
    plan_next_page,
    plan_previous_page,
    plan_search,
    record_id,
)

__all__ = [
    "BrowsePage",
    "InvalidSearchTerm",
    "QueryEngine",
    "QueryFilter",
    "QueryState",
    "build_filter",
    "build_query_options",
    "commit_page",
    "decode_records",
    "initial_state",
    "plan_clear_search",
    "plan_next_page",
    "plan_previous_page",
    "plan_search",
    "record_id",
]
