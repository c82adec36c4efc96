from decimal import Decimal

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from marketplace.main import app
from marketplace.core.database import get_session_maker
from marketplace.models import Base, Product
from marketplace.repositories.order import OrderRepository
from marketplace.services.inventory import InventoryLedger
from marketplace.services.order import OrderService


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    # file-backed so that every session and connection sees the same data
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_async_session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(test_async_session_maker):
    async with test_async_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def products(test_async_session_maker):
    """Widget (vendor 9), Gadget (vendor 7) and an out-of-stock Lamp (vendor 7)."""
    async with test_async_session_maker() as session:
        session.add_all([
            Product(id=1, name="Widget", price=Decimal("10.00"), stock=5, vendor_id=9),
            Product(id=2, name="Gadget", price=Decimal("25.50"), stock=3, vendor_id=7),
            Product(id=3, name="Lamp", price=Decimal("40.00"), stock=0, vendor_id=7),
        ])
        await session.commit()


@pytest_asyncio.fixture
async def ledger(test_async_session_maker):
    return InventoryLedger(test_async_session_maker)


@pytest_asyncio.fixture
async def order_service(db_session, ledger):
    return OrderService(OrderRepository(db_session), ledger)


@pytest_asyncio.fixture
async def client(test_async_session_maker):
    app.dependency_overrides[get_session_maker] = lambda: test_async_session_maker

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
