"""Shared pytest fixtures."""

import pytest

from tests.helpers.fake_terminal import capture_console


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point the config file at a temporary directory."""
    import termdrop.config

    directory = tmp_path / "termdrop"
    monkeypatch.setattr(termdrop.config, "CONFIG_DIR", directory)
    monkeypatch.setattr(termdrop.config, "CONFIG_FILE", directory / "config.json")
    return directory


@pytest.fixture
def err_console():
    """A console that records diagnostics in memory."""
    return capture_console()
