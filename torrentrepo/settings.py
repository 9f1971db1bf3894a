"""Persisted browse settings (last-used network and contract)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from torrentrepo import logger
from torrentrepo.config import RepoConfig

DEFAULT_SETTINGS_PATH = Path.home() / ".torrentrepo" / "settings.json"


class BrowseSettings(BaseModel):
    network: Optional[str] = None
    contract_id: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.network or self.contract_id)


def load_settings(path: Path = DEFAULT_SETTINGS_PATH) -> BrowseSettings:
    if not path.exists():
        return BrowseSettings()
    try:
        return BrowseSettings.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        logger.get_logger().warning(f"Ignoring unreadable settings file {path}: {exc}")
        return BrowseSettings()


def save_settings(settings: BrowseSettings, path: Path = DEFAULT_SETTINGS_PATH) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.model_dump_json(indent=2, exclude_none=True) + "\n", encoding="utf-8")


def clear_settings(path: Path = DEFAULT_SETTINGS_PATH) -> bool:
    """Remove the settings file; returns whether one existed."""
    if not path.exists():
        return False
    path.unlink()
    return True


def apply_settings(config: RepoConfig, settings: BrowseSettings) -> RepoConfig:
    """Saved values override the config file's [browse] network and contract."""
    updates = {}
    if settings.network:
        updates["network"] = settings.network.strip().lower()
    if settings.contract_id:
        updates["contract_id"] = settings.contract_id.strip()
    if not updates:
        return config
    return config.model_copy(update={"browse": config.browse.model_copy(update=updates)})
