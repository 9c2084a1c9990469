"""Shared fixtures: in-memory database, mocked OpenAI client, HTTP client."""

import json
from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import covera.domain  # noqa: F401  (registers kv_store on Base.metadata)
from covera.core.config import settings
from covera.db.base import Base, get_db
from covera.services.openai_service import (
    EMPTY_INSURANCE_FIELDS,
    DocumentExtractionClient,
    get_extraction_client,
    get_optional_extraction_client,
)
from covera.services.storage import BlobStore

PDF_TEXT = (
    "CERTIFICATE OF LIABILITY INSURANCE  ACORD 25  PRODUCER Acme Brokers  "
    "INSURED Bright Plumbing LLC  COMMERCIAL GENERAL LIABILITY  POLICY NUMBER GL-1001"
)


def days_from_today(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def make_completion(payload) -> MagicMock:
    """Fake ``chat.completions.create`` result carrying *payload* as content."""
    if payload is None or isinstance(payload, str):
        content = payload
    else:
        content = json.dumps(payload)
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    return response


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "vendor_limit", 150)
    monkeypatch.setattr(settings, "default_org_id", "test-org")


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def openai_client():
    """Stand-in for ``AsyncOpenAI`` with an AsyncMock ``chat.completions.create``."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=make_completion(EMPTY_INSURANCE_FIELDS))
    return client


@pytest.fixture
def extraction_client(openai_client):
    return DocumentExtractionClient(client=openai_client)


@pytest.fixture
def pdf_text(monkeypatch):
    """Make every PDF read as a short certificate without touching pdfplumber."""
    monkeypatch.setattr(
        "covera.services.text_extraction.extract_raw_text", lambda contents: PDF_TEXT,
    )
    return PDF_TEXT


@pytest.fixture
def blob_store(tmp_path):
    return BlobStore(tmp_path / "blobs")


@pytest_asyncio.fixture
async def client(engine, extraction_client):
    from covera.main import create_app

    app = create_app()
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_extraction_client] = lambda: extraction_client
    app.dependency_overrides[get_optional_extraction_client] = lambda: extraction_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
