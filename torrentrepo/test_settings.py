from __future__ import annotations

import json

import pytest

from torrentrepo import settings as repo_settings
from torrentrepo.config import parse_config


class _FakeLogger:
    def __init__(self) -> None:
        self.warnings: list[str] = []

    def warning(self, msg: str) -> None:
        self.warnings.append(msg)


def test_save_load_and_clear(tmp_path) -> None:
    path = tmp_path / "nested" / "settings.json"

    assert repo_settings.load_settings(path).is_empty()

    repo_settings.save_settings(repo_settings.BrowseSettings(network="testnet", contract_id="abc"), path)
    assert json.loads(path.read_text(encoding="utf-8")) == {"network": "testnet", "contract_id": "abc"}
    assert repo_settings.load_settings(path) == repo_settings.BrowseSettings(network="testnet", contract_id="abc")

    assert repo_settings.clear_settings(path) is True
    assert repo_settings.clear_settings(path) is False
    assert repo_settings.load_settings(path).is_empty()


def test_unreadable_settings_fall_back_to_defaults(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    log = _FakeLogger()
    monkeypatch.setattr(repo_settings.logger, "get_logger", lambda: log)
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    assert repo_settings.load_settings(path).is_empty()
    assert len(log.warnings) == 1


def test_apply_settings_overrides_browse_section() -> None:
    config = parse_config({"browse": {"network": "testnet", "contract_id": "from-config", "page_size": 6}})

    unchanged = repo_settings.apply_settings(config, repo_settings.BrowseSettings())
    applied = repo_settings.apply_settings(config, repo_settings.BrowseSettings(network=" MainNet ", contract_id="saved"))

    assert unchanged is config
    assert applied.browse.network == "mainnet"
    assert applied.browse.contract_id == "saved"
    assert applied.browse.page_size == 6
    assert config.browse.contract_id == "from-config"
