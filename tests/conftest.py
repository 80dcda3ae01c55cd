"""Shared fixtures: in-memory SQLite database, sessions, sample data and API client."""
import os

# billbook.config requires DATABASE_URL at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from billbook import models  # noqa: F401
from billbook.api.deps import get_registry_client
from billbook.database import Base, get_db
from billbook.main import app
from billbook.models.customer import Customer
from billbook.services.document_sequence_service import SequencePrefixes
from billbook.services.gst_registry import GstinRegistryClient


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def prefixes() -> SequencePrefixes:
    return SequencePrefixes(invoice="INV", dyeing_bill="DYE")


@pytest_asyncio.fixture
async def customer(db) -> Customer:
    customer = Customer(name="Sharma Textiles", state="Maharashtra", phone="9820012345")
    db.add(customer)
    await db.flush()
    return customer


@pytest_asyncio.fixture
async def other_customer(db) -> Customer:
    customer = Customer(name="Gupta Dye Works", state="Gujarat")
    db.add(customer)
    await db.flush()
    return customer


@pytest_asyncio.fixture
async def client(session_factory):
    """API client bound to the test database, registry lookups kept local."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_registry_client] = lambda: GstinRegistryClient(api_key="")

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
