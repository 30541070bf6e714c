import pytest

import config
from db import database


@pytest.fixture
def app_dirs(tmp_path, monkeypatch):
    """Point config and database at a temporary ~/.cardcoach."""
    config_dir = tmp_path / ".cardcoach"
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_dir / "config.toml")
    monkeypatch.setattr(database, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "cardcoach.db")
    for name in ("CARDCOACH_TIMEZONE", "CARDCOACH_LOG_LEVEL", "CARDCOACH_MIN_EASE_FACTOR"):
        monkeypatch.delenv(name, raising=False)
    return config_dir


@pytest.fixture
def db_conn(app_dirs):
    """Provide an initialized connection to a temporary database."""
    database.init_db()
    with database.get_conn() as conn:
        yield conn
