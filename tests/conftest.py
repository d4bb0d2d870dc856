"""Shared fixtures: SQLite-backed stores and an ASGI client wired to them."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from pathlib import Path  # noqa: E402
from typing import AsyncIterator  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from db.database import create_db_and_tables, get_async_session  # noqa: E402
from services.creator import RetryPolicy  # noqa: E402
from services.inventory import build_item_creator  # noqa: E402


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bizdesk.db'}")
    await create_db_and_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def client(session_maker: async_sessionmaker[AsyncSession]) -> AsyncIterator[httpx.AsyncClient]:
    from main import app
    from routers.inventory import get_item_creator

    async def _session() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[get_item_creator] = lambda: build_item_creator(session_maker, RetryPolicy())
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def item_payload() -> dict:
    return {
        "name": "olive-oil-500",
        "display_name": "Olive Oil 500ml",
        "tag": "pantry",
        "cost_price": 4.5,
        "selling_price": 7.25,
        "volume_weight": "500ml",
        "supplier": "Green Groves",
        "quantity": 12,
        "status": "in-stock",
    }
