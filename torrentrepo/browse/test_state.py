from __future__ import annotations

import pytest

from torrentrepo.browse.state import (
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
from torrentrepo.documents.schema import COLLECTIONS

MOVIE = COLLECTIONS["movie"]
BOOK = COLLECTIONS["book"]
OTHER = COLLECTIONS["other"]


def _records(count: int, start: int = 1) -> list[dict]:
    return [{"$id": f"doc-{n}"} for n in range(start, start + count)]


@pytest.mark.parametrize(
    ("collection", "term", "expected"),
    [
        (MOVIE, "tt0133093", QueryFilter("imdbId", "==", 133093)),
        (MOVIE, " 133093 ", QueryFilter("imdbId", "==", 133093)),
        (COLLECTIONS["tv"], "TT0903747", QueryFilter("seriesImdbId", "==", 903747)),
        (BOOK, "ol8483260w", QueryFilter("workId", "==", 8483260)),
        (OTHER, "  Nature Wall ", QueryFilter("title", "startsWith", "Nature Wall")),
    ],
)
def test_build_filter(collection, term, expected) -> None:
    assert build_filter(collection, term) == expected


def test_build_filter_rejects_unparseable_typed_ids() -> None:
    with pytest.raises(InvalidSearchTerm) as exc_info:
        build_filter(MOVIE, "matrix")
    assert exc_info.value.term == "matrix"
    assert "tt0133093" in str(exc_info.value)

    with pytest.raises(InvalidSearchTerm, match="OL133093W"):
        build_filter(BOOK, "OL12X")


def test_plan_search_starts_filtered_page_one() -> None:
    paged = QueryState("movie", page_number=3, cursor_stack=(None, "doc-12"), current_cursor="doc-24")

    searched = plan_search(paged, MOVIE, "tt0133093")

    assert searched == QueryState("movie", filter=QueryFilter("imdbId", "==", 133093))


def test_blank_search_clears() -> None:
    filtered = QueryState("other", filter=QueryFilter("title", "startsWith", "x"), page_number=2)

    assert plan_search(filtered, OTHER, "   ") == initial_state("other")
    assert plan_search(filtered, OTHER, None) == initial_state("other")
    assert plan_clear_search(filtered) == initial_state("other")


def test_forward_paging_pushes_cursor_and_backward_pops() -> None:
    page1 = commit_page(initial_state("movie"), _records(12))
    assert page1.last_record_id == "doc-12"

    pending2 = plan_next_page(page1, 12)
    assert pending2 is not None
    assert pending2.page_number == 2
    assert pending2.cursor_stack == (None,)
    assert pending2.current_cursor == "doc-12"

    page2 = commit_page(pending2, _records(12, start=13))
    pending3 = plan_next_page(page2, 12)
    assert pending3 is not None
    assert pending3.cursor_stack == (None, "doc-12")
    assert pending3.current_cursor == "doc-24"
    assert len(pending3.cursor_stack) == pending3.page_number - 1

    back = plan_previous_page(pending3)
    assert back is not None
    assert back.page_number == 2
    assert back.current_cursor == "doc-12"
    assert back.cursor_stack == (None,)

    first = plan_previous_page(back)
    assert first is not None
    assert first.page_number == 1
    assert first.current_cursor is None
    assert first.cursor_stack == ()


def test_short_or_empty_pages_have_no_next() -> None:
    assert plan_next_page(commit_page(initial_state("movie"), _records(5)), 12) is None
    assert plan_next_page(commit_page(initial_state("movie"), []), 12) is None
    assert plan_next_page(initial_state("movie"), 12) is None


def test_previous_on_first_page_is_noop() -> None:
    assert plan_previous_page(initial_state("tv")) is None


def test_full_page_without_record_ids_has_no_next() -> None:
    state = commit_page(initial_state("movie"), [{"data": {}}] * 12)
    assert state.last_record_id is None
    assert plan_next_page(state, 12) is None


def test_build_query_options() -> None:
    state = QueryState(
        "book",
        filter=QueryFilter("workId", "==", 8483260),
        page_number=2,
        cursor_stack=(None,),
        current_cursor="doc-12",
    )
    options = build_query_options(state, BOOK, 12)

    assert options.to_payload() == {
        "limit": 12,
        "orderBy": [["workId", "asc"]],
        "where": [["workId", "==", 8483260]],
        "startAfter": "doc-12",
    }
    assert build_query_options(initial_state("book"), BOOK, 12).to_payload() == {
        "limit": 12,
        "orderBy": [["workId", "asc"]],
    }


def test_record_id_reads_either_key() -> None:
    assert record_id({"$id": "a", "id": "b"}) == "a"
    assert record_id({"id": "b"}) == "b"
    assert record_id({}) is None
