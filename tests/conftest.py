"""Shared fixtures."""

import pytest

from livechat import config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config at a temp file so tests never touch the real one."""
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "livechat.yaml")
    config.reset()
    yield tmp_path / "livechat.yaml"
    config.reset()
