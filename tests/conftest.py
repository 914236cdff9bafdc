import pytest
from fastapi.testclient import TestClient

from src.config import get_settings
from src.main import app
from src.services import entry_store


@pytest.fixture
def settings(tmp_path, monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "entries_dir", str(tmp_path))
    monkeypatch.setattr(settings, "entry_store", "local")
    monkeypatch.setattr(entry_store, "_entry_store", None)
    return settings


@pytest.fixture
def client(settings):
    with TestClient(app) as c:
        yield c
