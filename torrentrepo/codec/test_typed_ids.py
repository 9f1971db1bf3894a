from __future__ import annotations

import pytest

from torrentrepo.codec.typed_ids import (
    TYPED_ID_MAX,
    TypedId,
    TypedIdFormat,
    format_typed_id,
    parse_typed_id,
)

IMDB = TypedIdFormat.IMDB
WORK = TypedIdFormat.OPENLIBRARY_WORK


def test_imdb_display_form_round_trips() -> None:
    assert parse_typed_id("tt0133093", IMDB) == 133093
    assert format_typed_id(parse_typed_id("tt0133093", IMDB), IMDB) == "tt0133093"


def test_openlibrary_work_id_parses_display_form() -> None:
    assert parse_typed_id("OL8483260W", WORK) == 8483260
    assert parse_typed_id("ol8483260w", "openlibrary-work") == 8483260
    assert format_typed_id(8483260, WORK) == "OL8483260W"


def test_parse_accepts_bare_integers_within_range() -> None:
    assert parse_typed_id("133093", IMDB) == 133093
    assert parse_typed_id("  42 ", WORK) == 42
    assert parse_typed_id(0, IMDB) == 0
    assert parse_typed_id(str(TYPED_ID_MAX), IMDB) == TYPED_ID_MAX


@pytest.mark.parametrize(
    "value",
    ["", "   ", "tt", "ttabc", "OL8483260W", "12abc", "-5", "99999999999", TYPED_ID_MAX + 1, -1, True, None, 3.5],
)
def test_parse_returns_none_for_unusable_imdb_input(value: object) -> None:
    assert parse_typed_id(value, IMDB) is None


def test_parse_rejects_other_format_display_strings() -> None:
    assert parse_typed_id("tt0133093", WORK) is None


def test_format_pads_imdb_to_seven_digits_only() -> None:
    assert format_typed_id(1, IMDB) == "tt0000001"
    assert format_typed_id(12345678, IMDB) == "tt12345678"


def test_format_rejects_out_of_range_values() -> None:
    with pytest.raises(ValueError):
        format_typed_id(-1, IMDB)
    with pytest.raises(ValueError):
        format_typed_id(TYPED_ID_MAX + 1, WORK)


def test_typed_id_value_object() -> None:
    typed = TypedId.parse("tt0903747", IMDB)
    assert typed == TypedId(903747, IMDB)
    assert str(typed) == "tt0903747"
    assert TypedId.parse("nope", IMDB) is None
