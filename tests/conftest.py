"""Shared pytest fixtures for dreistrom tests."""

import pytest

import dreistrom.core.config as configmod
import dreistrom.data.database as dbmod
from dreistrom.data.database import get_db, set_db_path


@pytest.fixture(autouse=True)
def isolated_db(tmp_path):
    """Each test gets a fresh temp DB. Resets the global singleton after."""
    db_path = tmp_path / "test.db"
    set_db_path(str(db_path))
    db = get_db()
    yield db
    db.conn.close()
    dbmod._db = None


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config.json at a temp file so tests never read the user's settings."""
    config_path = tmp_path / "config.json"
    monkeypatch.setattr(configmod, "_config_path", lambda: config_path)
    configmod.reset_config()
    yield config_path
    configmod.reset_config()
