import os
import tempfile
import uuid

# keep the module-level app in filedrop.main away from the working tree
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="filedrop-test-"))

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from filedrop.main import create_app
from filedrop.shared.config import Settings
from filedrop.transfers.models import UploadPart
from filedrop.transfers.registry import TransferRegistry
from filedrop.transfers.storage import ContentStore


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def store(tmp_path):
    return ContentStore(tmp_path / "store")

@pytest.fixture
def registry(store, clock):
    return TransferRegistry(store, clock=clock)

@pytest.fixture
def make_part(store):
    def _make(name: str = "a.txt", data: bytes = b"hello") -> UploadPart:
        tmp = store.tmp_dir / uuid.uuid4().hex
        tmp.write_bytes(data)
        return UploadPart(original_name=name, temp_path=str(tmp), size_bytes=len(data))
    return _make

@pytest.fixture
def make_file(store, make_part):
    def _make(name: str = "a.txt", data: bytes = b"hello"):
        return store.commit(make_part(name, data))
    return _make

@pytest.fixture
def app(tmp_path, clock):
    cfg = Settings(STORAGE_DIR=str(tmp_path / "app"), LOG_LEVEL="DEBUG")
    return create_app(cfg, clock=clock)

@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
