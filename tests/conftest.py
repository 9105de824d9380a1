from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


class StaticDirectory:
    """Directory double returning fixed records and counting collections."""

    def __init__(self, records=None, *, error: Exception | None = None) -> None:
        self.records = list(records or [])
        self.error = error
        self.calls = 0

    async def collect(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.records)


class FakeContactSearch:
    def __init__(self, match=None, *, error: Exception | None = None) -> None:
        self.match = match
        self.error = error
        self.searched: list[str] = []

    async def search_by_phone(self, phone_number: str):
        self.searched.append(phone_number)
        if self.error is not None:
            raise self.error
        return self.match


@pytest.fixture(scope="session")
def app():
    # No credentials: the startup build fails fast without touching the network.
    os.environ["HUBSPOT_ACCESS_TOKEN"] = ""
    os.environ["AIRCALL_API_ID"] = ""
    os.environ["AIRCALL_API_TOKEN"] = ""
    os.environ["MAPPING_REFRESH_POLICY"] = "background"
    os.environ["ROUTING_RESPONSE_SHAPE"] = "nested"

    import importlib

    from config.settings import get_settings

    get_settings.cache_clear()
    sys.modules.pop("main", None)

    main = importlib.import_module("main")
    return main.app


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
