"""Test fixtures."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from shipquote.config import Settings
from shipquote.database import Base, get_session_factory
from shipquote.main import app
from shipquote.services.domain import Address, CartLine, StoreAccount, StoreCart

# Use SQLite for tests (no external DB needed)
TEST_DB_URL = "sqlite+aiosqlite:///./test.db"

# NullPool: each test runs on its own event loop
test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=NullPool)
test_session = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_session
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


app.dependency_overrides[get_session_factory] = lambda: test_session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_cart():
    return _make_cart


@pytest.fixture
def settings():
    return Settings(_env_file=None)


def _make_cart(
    subtotal: int = 30000,
    weight_g: int = 400,
    items: int = 1,
    subdivision: str = "RM",
    locality: str = "Providencia",
    domain: str = "acme.myshopify.com",
    store_id=1,
    admin_api_token=None,
) -> StoreCart:
    """Store cart whose subtotal and unit count are exact."""
    lines = [CartLine(store_id=domain, variant_ref=None, unit_price=subtotal, quantity=1)]
    if items > 1:
        lines.append(CartLine(store_id=domain, variant_ref=None, unit_price=0, quantity=items - 1))
    return StoreCart(
        store=StoreAccount(domain=domain, id=store_id, admin_api_token=admin_api_token),
        lines=lines,
        address=Address(subdivision=subdivision, locality=locality),
        weight_g=weight_g,
    )
