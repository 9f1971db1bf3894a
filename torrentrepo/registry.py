"""Contract registration and document submission against a DocumentStore."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from torrentrepo import logger
from torrentrepo.codec.contract_id import derive_contract_id, generate_entropy
from torrentrepo.config import IdentityConfig
from torrentrepo.documents.models import TorrentDocument
from torrentrepo.documents.prepare import build_document
from torrentrepo.documents.schema import build_contract_definition
from torrentrepo.store.errors import SubmissionError
from torrentrepo.store.protocols import DocumentStore
from torrentrepo.store.types import Credentials


class ContractNotFoundError(SubmissionError):
    """Raised when a submission targets a contract the store does not know."""


@dataclass(frozen=True)
class ContractRegistration:
    contract_id: str
    derived_contract_id: str
    result: Mapping[str, Any]

    @property
    def id_mismatch(self) -> bool:
        return self.contract_id != self.derived_contract_id


@dataclass(frozen=True)
class SubmittedDocument:
    document_id: str
    document: TorrentDocument


def credentials_from_identity(identity: IdentityConfig) -> Credentials:
    if not identity.has_credentials:
        raise ValueError("Identity ID and private key (WIF) are required; set them under [identity].")
    return Credentials(identity_id=identity.identity_id.strip(), private_key_wif=identity.private_key_wif.strip())


def assigned_contract_id(result: Mapping[str, Any] | None) -> str | None:
    """Contract ID reported by the store, wherever the registration result carries it."""
    if not isinstance(result, Mapping):
        return None
    for key in ("dataContractId", "contractId", "id"):
        value = result.get(key)
        if isinstance(value, str) and value:
            return value
    nested = result.get("dataContract")
    if isinstance(nested, Mapping):
        for key in ("id", "$id"):
            value = nested.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def reconcile_contract_id(derived: str, result: Mapping[str, Any] | None) -> str:
    assigned = assigned_contract_id(result)
    if assigned is None or assigned == derived:
        return derived
    logger.get_logger().warning(
        f"Store assigned contract ID {assigned}, derived {derived}; using the store's value."
    )
    return assigned


async def register_contract(
    store: DocumentStore,
    credentials: Credentials,
    entropy: bytes | None = None,
) -> ContractRegistration:
    """Derive a contract ID, register the five-collection contract and reconcile the ID."""
    entropy = generate_entropy() if entropy is None else entropy
    derived = derive_contract_id(credentials.identity_id, entropy)
    log = logger.get_logger()
    log.info(f"Registering contract {derived[:12]}... for identity {credentials.identity_id[:12]}...")

    definition = build_contract_definition(credentials.identity_id, derived)
    result = await store.register_contract(definition, credentials.identity_id, credentials)
    contract_id = reconcile_contract_id(derived, result)
    log.info(f"Contract registered: {contract_id}")
    return ContractRegistration(contract_id=contract_id, derived_contract_id=derived, result=result)


async def verify_contract(store: DocumentStore, contract_id: str) -> Mapping[str, Any] | None:
    logger.get_logger().debug(f"Verifying contract exists: {contract_id}")
    return await store.fetch_contract(contract_id)


async def submit_document(
    store: DocumentStore,
    contract_id: str,
    collection_id: str,
    form: Mapping[str, Any],
    credentials: Credentials,
) -> SubmittedDocument:
    """
    Validate form input, confirm the contract exists, then create the document.

    Validation problems raise DocumentValidationError before any store call.
    """
    document = build_document(collection_id, form)
    contract = await verify_contract(store, contract_id)
    if contract is None:
        raise ContractNotFoundError(
            f"Contract {contract_id} not found on network. "
            "It may need more time to propagate, or the ID may be incorrect."
        )

    document_id = await store.create(
        contract_id,
        document.collection,
        credentials.identity_id,
        document.to_wire(),
        credentials,
    )
    logger.get_logger().info(f"Submitted {document.collection} document #{document_id}")
    return SubmittedDocument(document_id=document_id, document=document)
