"""Tracker announce-list parsing and the stored newline-joined form."""

from __future__ import annotations

import re
from typing import Iterable

ACCEPTED_TRACKER_SCHEMES = ("udp://", "http://", "https://", "wss://")

_SPLIT_RE = re.compile(r"[\n,]+")


def is_accepted_tracker(url: str) -> bool:
    return url.startswith(ACCEPTED_TRACKER_SCHEMES)


def parse_tracker_list(raw: object) -> list[str]:
    """Split on newlines or commas, keep accepted schemes, drop duplicates."""
    if not isinstance(raw, str) or not raw:
        return []
    candidates = (part.strip() for part in _SPLIT_RE.split(raw))
    return list(dict.fromkeys(url for url in candidates if url and is_accepted_tracker(url)))


def split_stored_trackers(stored: str | None) -> list[str]:
    if not stored:
        return []
    return [line.strip() for line in stored.split("\n") if line.strip()]


def join_trackers(trackers: Iterable[str]) -> str:
    return "\n".join(dict.fromkeys(t.strip() for t in trackers if t and t.strip()))
