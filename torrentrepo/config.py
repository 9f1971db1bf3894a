"""
config.py - Configuration model for torrentrepo
"""

import sys
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field
from rich.console import Console

from torrentrepo.documents.schema import DEFAULT_COLLECTION

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

console = Console()

DEFAULT_CONTRACT_ID = "2UGyMaAc1bhk92gkvcpDLC4YvSd5q3SLhEZ1Vc4nqjwk"
DEFAULT_PAGE_SIZE = 12


class NetworkConfig(BaseModel):
    name: str
    url: str


class BrowseConfig(BaseModel):
    network: str = "testnet"
    contract_id: str = DEFAULT_CONTRACT_ID
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, description="Documents per page")
    default_collection: str = DEFAULT_COLLECTION


class IdentityConfig(BaseModel):
    """Identity used for contract registration and document submission."""

    identity_id: str = ""
    private_key_wif: str = Field(
        default="",
        description="WIF private key; sent only in the Authorization header",
    )

    @property
    def has_credentials(self) -> bool:
        return bool(self.identity_id and self.private_key_wif)


class StoreConfig(BaseModel):
    timeout: int = Field(default=15, ge=1, description="Total request timeout in seconds")
    max_retries: int = Field(default=3, ge=1, description="Attempts for transient gateway failures")
    min_interval_seconds: float = Field(default=0.25, ge=0, description="Spacing between requests to one gateway")
    max_concurrency: int = Field(default=3, ge=1)


class RepoConfig(BaseModel):
    browse: BrowseConfig = Field(default_factory=BrowseConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    networks: Dict[str, NetworkConfig] = Field(default_factory=dict)
    config_path: Optional[Path] = None

    def resolve_network(self, name: Optional[str] = None) -> NetworkConfig:
        key = (name or self.browse.network).strip().lower()
        network = self.networks.get(key)
        if network is not None:
            return network
        supported = ", ".join(self.networks) or "(none configured)"
        raise ValueError(f"Unsupported network '{key}'. Supported networks: {supported}.")


def parse_config(config_data: dict, config_path: Optional[Path] = None) -> RepoConfig:
    return RepoConfig(
        browse=BrowseConfig(**config_data.get("browse", {})),
        identity=IdentityConfig(**config_data.get("identity", {})),
        store=StoreConfig(**config_data.get("store", {})),
        networks={
            name.lower(): NetworkConfig(name=name.lower(), **network_data)
            for name, network_data in config_data.get("networks", {}).items()
        },
        config_path=config_path,
    )


def load_config(config_path: Path) -> RepoConfig:
    """Load configuration from TOML file"""

    if not config_path.exists():
        console.print(f"[red][ERROR][/red] Configuration file not found: {config_path}")
        console.print("Please create config.toml (see config.example.toml)")
        sys.exit(1)

    try:
        with open(config_path, "rb") as f:
            config_data = tomllib.load(f)
        return parse_config(config_data, config_path)
    except Exception as e:
        console.print(f"[red][ERROR][/red] Error loading configuration: {e}")
        sys.exit(1)
