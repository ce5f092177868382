from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import pytest
from google.api_core import exceptions as gcs_errors

from src.feeltime.feeltime.database.connection import SQLiteConnection
from src.feeltime.feeltime.storage.gcs_store import GCSEmotionStore
from src.feeltime.feeltime.storage.sqlite_store import SQLiteEmotionStore


class FakeBlob:
    def __init__(self, bucket: "FakeBucket", name: str):
        self._bucket = bucket
        self.name = name

    @property
    def generation(self) -> Optional[int]:
        obj = self._bucket.objects.get(self.name)
        return obj[1] if obj else None

    def download_as_bytes(self, if_generation_match: Optional[int] = None) -> bytes:
        obj = self._bucket.objects.get(self.name)
        if obj is None:
            raise gcs_errors.NotFound(f"No such object: {self.name}")
        if if_generation_match is not None and obj[1] != if_generation_match:
            raise gcs_errors.PreconditionFailed(f"generation mismatch: {self.name}")
        return obj[0]

    def upload_from_string(self, data, content_type: Optional[str] = None, if_generation_match: Optional[int] = None):
        current = self._bucket.objects.get(self.name)
        current_generation = current[1] if current else 0
        if if_generation_match is not None and if_generation_match != current_generation:
            raise gcs_errors.PreconditionFailed(f"generation mismatch: {self.name}")
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._bucket.next_generation += 1
        self._bucket.objects[self.name] = (data, self._bucket.next_generation)

    def delete(self) -> None:
        if self.name not in self._bucket.objects:
            raise gcs_errors.NotFound(f"No such object: {self.name}")
        del self._bucket.objects[self.name]


class FakeBucket:
    """In-memory stand-in for ``google.cloud.storage.Bucket``."""

    def __init__(self, name: str = "feeltime-test"):
        self.name = name
        self.objects: Dict[str, Tuple[bytes, int]] = {}
        self.next_generation = 0
        self.reloads = 0

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self, name)

    def get_blob(self, name: str) -> Optional[FakeBlob]:
        return FakeBlob(self, name) if name in self.objects else None

    def list_blobs(self, prefix: str = "") -> List[FakeBlob]:
        return [FakeBlob(self, n) for n in sorted(self.objects) if n.startswith(prefix)]

    def reload(self) -> None:
        self.reloads += 1


class TickingClock:
    """Deterministic clock: every call is one second later."""

    def __init__(self, start: datetime):
        self._current = start

    def __call__(self) -> datetime:
        value = self._current
        self._current = self._current + timedelta(seconds=1)
        return value


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 6, 9, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def fake_bucket() -> FakeBucket:
    return FakeBucket()


@pytest.fixture
def sqlite_store(tmp_path) -> SQLiteEmotionStore:
    return SQLiteEmotionStore(SQLiteConnection(tmp_path / "data" / "test.db"))


@pytest.fixture
def gcs_store(fake_bucket) -> GCSEmotionStore:
    return GCSEmotionStore(fake_bucket, prefix="feeltime-test", download_workers=4)


@pytest.fixture(params=["sqlite", "gcs"])
def store(request, tmp_path, fake_bucket):
    """Each contract test runs against every backend available offline."""
    if request.param == "sqlite":
        return SQLiteEmotionStore(SQLiteConnection(tmp_path / "contract.db"))
    return GCSEmotionStore(fake_bucket, prefix="contract", download_workers=4)
