"""Shared store data types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class QueryOptions:
    limit: int
    order_by: tuple[tuple[str, str], ...] = ()
    where: tuple[tuple[str, str, Any], ...] = ()
    start_after: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Wire form; keys without a value are omitted."""
        payload: dict[str, Any] = {"limit": self.limit}
        if self.order_by:
            payload["orderBy"] = [list(clause) for clause in self.order_by]
        if self.where:
            payload["where"] = [list(clause) for clause in self.where]
        if self.start_after is not None:
            payload["startAfter"] = self.start_after
        return payload


@dataclass(frozen=True)
class Credentials:
    identity_id: str
    private_key_wif: str

    def __repr__(self) -> str:
        return f"Credentials(identity_id={self.identity_id!r}, private_key_wif='***')"
