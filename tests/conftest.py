"""Shared pytest fixtures."""

import logging

import pytest

from constants import Constants


@pytest.fixture(autouse=True)
def restore_constants():
    """Undo Constants overrides made by config/CLI tests."""
    saved = {k: v for k, v in vars(Constants).items() if k.isupper()}
    yield
    for key, value in saved.items():
        setattr(Constants, key, value)


@pytest.fixture
def mods_dir(tmp_path):
    """An empty mods directory."""
    path = tmp_path / "mods"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging() replaces root handlers; put them back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
