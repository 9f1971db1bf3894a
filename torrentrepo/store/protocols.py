"""Protocol definition for the document store."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence

from torrentrepo.store.types import Credentials, QueryOptions


class DocumentStore(Protocol):
    """Document-store API used by the browse engine and the registry."""

    async def connect(self) -> None:
        ...

    async def query(
        self,
        contract_id: str,
        collection_id: str,
        options: QueryOptions,
    ) -> Sequence[Mapping[str, Any]]:
        ...

    async def create(
        self,
        contract_id: str,
        collection_id: str,
        owner_id: str,
        data: Mapping[str, Any],
        credentials: Credentials,
    ) -> str:
        ...

    async def fetch_contract(self, contract_id: str) -> Mapping[str, Any] | None:
        ...

    async def register_contract(
        self,
        definition: Mapping[str, Any],
        owner_id: str,
        credentials: Credentials,
    ) -> Mapping[str, Any]:
        ...

    async def close(self) -> None:
        ...
