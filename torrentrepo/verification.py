"""
verification.py - Gateway and contract reachability check for torrentrepo
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from torrentrepo.config import RepoConfig
from torrentrepo.store.errors import StoreError
from torrentrepo.store.gateway_client import GatewayStoreAdapter
from torrentrepo.store.protocols import DocumentStore

console = Console()


async def check_gateway(store: DocumentStore, label: str) -> tuple[str, bool, str]:
    try:
        await store.connect()
    except StoreError as exc:
        return label, False, str(exc)
    return label, True, "Reachable"


async def check_contract(store: DocumentStore, contract_id: str) -> tuple[str, bool, str]:
    try:
        contract = await store.fetch_contract(contract_id)
    except StoreError as exc:
        return "Contract", False, str(exc)
    if contract is None:
        return "Contract", False, f"{contract_id} not found on network"
    schemas = contract.get("documentSchemas")
    detail = f"{contract_id} found"
    if isinstance(schemas, dict):
        detail += f" ({len(schemas)} document types)"
    return "Contract", True, detail


def render_results(results: list[tuple[str, bool, str]]) -> None:
    table = Table(title="Store Verification Results")
    table.add_column("Check", style="cyan", no_wrap=True)
    table.add_column("Status", style="bold", no_wrap=True)
    table.add_column("Details", style="yellow")
    for check, status, details in results:
        status_str = "[green]✓ OK[/green]" if status else "[red]✗ Failed[/red]"
        table.add_row(check, status_str, escape(str(details).strip()[:100]))
    console.print(table)


async def verify_store(config: RepoConfig, store: DocumentStore | None = None) -> bool:
    """Connect to the configured network and confirm the browse contract exists."""
    owns_store = store is None
    if store is None:
        store = GatewayStoreAdapter.from_config(config)
    label = f"{config.browse.network.upper()} Gateway"
    try:
        results = [await check_gateway(store, label)]
        if results[0][1]:
            results.append(await check_contract(store, config.browse.contract_id))
    finally:
        if owns_store:
            await store.close()

    render_results(results)
    return all(status for _, status, _ in results)
