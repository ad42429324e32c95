"""
backend/tests/conftest.py

Purpose:
    Shared pytest bootstrap: import paths for the backend package, a test JWT
    secret, and fixtures for a temporary JSON store and an API client.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

_THIS_FILE = Path(__file__).resolve()
_BACKEND_DIR = _THIS_FILE.parents[1]
_REPO_ROOT = _THIS_FILE.parents[2]

for candidate in (str(_BACKEND_DIR), str(_REPO_ROOT)):
    if candidate not in sys.path:
        sys.path.insert(0, candidate)

os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")


@pytest.fixture
def store(tmp_path):
    from trainerhub.database import JSONStore

    db = JSONStore(tmp_path / "data")
    db.ensure_collections()
    return db


@pytest.fixture
def client(tmp_path, monkeypatch):
    from fastapi.testclient import TestClient

    from trainerhub.config import settings
    from trainerhub.main import app

    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path / "api-data"))
    monkeypatch.setattr(settings, "STORE_SERIALIZE_WRITES", True)
    with TestClient(app) as test_client:
        yield test_client
