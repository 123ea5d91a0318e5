"""
Shared fixtures: a throwaway filesystem root per test and a TestClient bound to it.
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

_BACKEND = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend"))
if _BACKEND not in sys.path:
    sys.path.insert(0, _BACKEND)

from app import create_app  # noqa: E402
from settings import Settings, normalize_private_dirs  # noqa: E402

TOKEN = "s3cret-token"


@pytest.fixture
def settings(tmp_path):
    root = tmp_path / "filesystem"
    return Settings(
        root=root,
        token=TOKEN.encode(),
        private_dirs=normalize_private_dirs(["hidden", "nested/secret/"], root / "public"),
        compress=False,
    )


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))


@pytest.fixture
def auth():
    return {"Auth": TOKEN}
