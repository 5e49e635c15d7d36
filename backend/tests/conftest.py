"""Pytest fixtures for the asset pack seeder."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path
from typing import Any

from alembic import command
from alembic.config import Config
import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel

from core.config import settings
from db.session import create_engine, create_session_maker
from services import storage
from services.content_host import ContentHostClient

CONTENT_HOST_URL = "https://assets.test"


def _run_alembic_migrations(database_url: str) -> None:
    """Apply Alembic migrations to the given database URL."""
    backend_dir = Path(__file__).resolve().parents[1]
    alembic_cfg = Config(str(backend_dir / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(backend_dir / "alembic"))

    original_database_url = settings.database_url
    try:
        settings.database_url = database_url
        command.upgrade(alembic_cfg, "head")
    finally:
        settings.database_url = original_database_url


@pytest.fixture(scope="session")
def test_database_url(tmp_path_factory) -> str:
    """Create and migrate a file-backed SQLite database for tests."""
    db_dir = tmp_path_factory.mktemp("sqlite")
    db_path = db_dir / "seeder-test.db"
    database_url = f"sqlite+aiosqlite:///{db_path}"
    _run_alembic_migrations(database_url)
    return database_url


@pytest.fixture()
def migrated_database_url(tmp_path) -> str:
    """Migrate a fresh SQLite database owned by a single test."""
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'seed-run.db'}"
    _run_alembic_migrations(database_url)
    return database_url


@pytest_asyncio.fixture()
async def test_engine(test_database_url: str) -> AsyncIterator[AsyncEngine]:
    """Create an async engine bound to the migrated database, emptied first."""
    engine = create_engine(test_database_url)
    async with engine.begin() as connection:
        for table in reversed(SQLModel.metadata.sorted_tables):
            await connection.execute(table.delete())
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to the test engine."""
    return create_session_maker(test_engine)


@pytest_asyncio.fixture()
async def db_session(session_maker) -> AsyncIterator[AsyncSession]:
    """Provide a raw database session to tests."""
    async with session_maker() as session:
        yield session


class FakeS3Error(Exception):
    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


class _FakeResponse:
    def __init__(self, payload: bytes) -> None:
        self.payload = payload
        self.closed = False
        self.released = False

    def read(self) -> bytes:
        return self.payload

    def close(self) -> None:
        self.closed = True

    def release_conn(self) -> None:
        self.released = True


class FakeMinio:
    """In-memory stand-in for the subset of the MinIO client the seeder uses."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.metadata: dict[tuple[str, str], dict[str, Any]] = {}
        self.put_calls: list[str] = []
        self.buckets: set[str] = set()
        self.bucket_checks: list[str] = []

    def bucket_exists(self, bucket: str) -> bool:
        self.bucket_checks.append(bucket)
        return bucket in self.buckets

    def make_bucket(self, bucket: str) -> None:
        self.buckets.add(bucket)

    def stat_object(self, bucket: str, key: str) -> dict[str, int]:
        if (bucket, key) not in self.objects:
            raise FakeS3Error("NoSuchKey")
        return {"size": len(self.objects[(bucket, key)])}

    def get_object(self, bucket: str, key: str) -> _FakeResponse:
        if (bucket, key) not in self.objects:
            raise FakeS3Error("NoSuchKey")
        return _FakeResponse(self.objects[(bucket, key)])

    def put_object(self, bucket, key, data, length, content_type, metadata=None):
        payload = data.read()
        assert len(payload) == length
        self.objects[(bucket, key)] = payload
        self.metadata[(bucket, key)] = {
            "content_type": content_type,
            **(metadata or {}),
        }
        self.put_calls.append(key)


@pytest.fixture()
def fake_minio(monkeypatch) -> FakeMinio:
    monkeypatch.setattr(storage, "S3Error", FakeS3Error)
    return FakeMinio()


@pytest.fixture()
def object_store(fake_minio: FakeMinio) -> storage.ObjectStore:
    return storage.ObjectStore(fake_minio, "test-bucket")


class ContentHostStub:
    """Serves content blobs through ``httpx.MockTransport`` and records requests."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.requested: list[str] = []
        self.unreachable = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        content_id = request.url.path.lstrip("/")
        self.requested.append(content_id)
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if content_id not in self.blobs:
            return httpx.Response(404, content=b"not found")
        return httpx.Response(200, content=self.blobs[content_id])


@pytest.fixture()
def content_host_stub() -> ContentHostStub:
    return ContentHostStub()


@pytest_asyncio.fixture()
async def content_host(content_host_stub: ContentHostStub) -> AsyncIterator[ContentHostClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(content_host_stub.handler))
    yield ContentHostClient(CONTENT_HOST_URL, client=client)
    await client.aclose()


@pytest.fixture()
def write_fixtures(tmp_path: Path) -> Iterator[Callable[..., Path]]:
    """Return a helper that lays out a dated fixture directory."""

    def _write(
        packs: list[dict[str, Any]],
        assets_by_pack: dict[str, list[dict[str, Any]]],
        *,
        folder: str = "2020-09-14",
        thumbnails: dict[str, bytes] | None = None,
    ) -> Path:
        base_dir = tmp_path / "seed_data"
        data_dir = base_dir / folder
        data_dir.mkdir(parents=True, exist_ok=True)
        (data_dir / "packs.json").write_text(
            json.dumps({"ok": True, "data": {"packs": packs}}),
            encoding="utf-8",
        )
        for pack_id, assets in assets_by_pack.items():
            (data_dir / f"{pack_id}.json").write_text(
                json.dumps(
                    {
                        "ok": True,
                        "data": {"id": pack_id, "version": 1, "title": pack_id, "assets": assets},
                    }
                ),
                encoding="utf-8",
            )
        for pack_id, payload in (thumbnails or {}).items():
            (data_dir / f"{pack_id}.png").write_bytes(payload)
        return base_dir

    yield _write
