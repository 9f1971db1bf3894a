"""IMDB and OpenLibrary Work identifiers: display strings vs stored integers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

TYPED_ID_MIN = 0
TYPED_ID_MAX = 9_999_999_999


class TypedIdFormat(str, Enum):
    IMDB = "imdb"
    OPENLIBRARY_WORK = "openlibrary-work"


_DISPLAY_PATTERNS: dict[TypedIdFormat, re.Pattern[str]] = {
    TypedIdFormat.IMDB: re.compile(r"^tt(\d{1,10})$", re.IGNORECASE),
    TypedIdFormat.OPENLIBRARY_WORK: re.compile(r"^OL(\d{1,10})W$", re.IGNORECASE),
}
_BARE_PATTERN = re.compile(r"^\d{1,10}$")


def _in_range(value: int) -> bool:
    return TYPED_ID_MIN <= value <= TYPED_ID_MAX


def parse_typed_id(value: object, fmt: TypedIdFormat | str) -> int | None:
    """
    Parse a display string ("tt0133093", "OL8483260W") or a bare integer.

    Returns None for anything unparseable or out of range; callers treat that
    as "field absent" and validate separately.
    """
    fmt = TypedIdFormat(fmt)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if _in_range(value) else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    match = _DISPLAY_PATTERNS[fmt].match(text)
    if match:
        parsed = int(match.group(1))
    elif _BARE_PATTERN.match(text):
        parsed = int(text)
    else:
        return None
    return parsed if _in_range(parsed) else None


def format_typed_id(value: int, fmt: TypedIdFormat | str) -> str:
    fmt = TypedIdFormat(fmt)
    if isinstance(value, bool) or not isinstance(value, int) or not _in_range(value):
        raise ValueError(f"{fmt.value} ID out of range: {value!r}")
    if fmt is TypedIdFormat.IMDB:
        return f"tt{value:07d}"
    return f"OL{value}W"


@dataclass(frozen=True)
class TypedId:
    value: int
    format: TypedIdFormat

    @classmethod
    def parse(cls, text: object, fmt: TypedIdFormat | str) -> "TypedId | None":
        parsed = parse_typed_id(text, fmt)
        if parsed is None:
            return None
        return cls(parsed, TypedIdFormat(fmt))

    def __str__(self) -> str:
        return format_typed_id(self.value, self.format)
