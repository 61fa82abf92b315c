"""
Pytest fixtures - in-memory database, API client, settings and a fake image host.
Each test gets a fresh database; requests get a fresh session like in production.
"""

from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from forumshop.config import Settings, get_settings
from forumshop.core.dependencies import get_image_uploader
from forumshop.db.base import Base
from forumshop.db.models import Category, Inventory, Item, User, item_categories
from forumshop.db.session import get_db
from forumshop.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite://"
API_KEY = "test-api-key"


class FakeImageUploader:
    """Stands in for ImageKit: records uploads and returns a predictable URL."""

    def __init__(self):
        self.uploads = []

    async def upload(self, image, *, prefix: str, transformation: str) -> str:
        self.uploads.append((image.filename, prefix, transformation))
        return f"https://img.test/{prefix}_{image.filename}"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        api_key=API_KEY,
        database_url=TEST_DATABASE_URL,
        forum_url="http://forum.test",
        auto_create_schema=False,
    )


@pytest.fixture
def api_headers() -> dict:
    return {"X-API-KEY": API_KEY}


@pytest.fixture
def uploader() -> FakeImageUploader:
    return FakeImageUploader()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as s:
        yield s


@pytest_asyncio.fixture
async def client(session_maker, settings, uploader, api_headers):
    async def override_get_db():
        async with session_maker() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_image_uploader] = lambda: uploader
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=api_headers,
    ) as ac:
        yield ac
    app.dependency_overrides.clear()



class Seeder:
    """Writes fixture rows directly, one committed session per call."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def _save(self, row):
        async with self.session_maker() as s:
            s.add(row)
            await s.commit()
        return row

    async def category(self, name: str = "Snacks", **kw) -> Category:
        return await self._save(Category(name=name, image=f"https://img.test/{name}.png", **kw))

    async def item(
        self, categories: list[Category], name: str = "Cookie", price: str = "10.00", **kw
    ) -> Item:
        async with self.session_maker() as s:
            item = Item(
                name=name,
                description=f"{name} description",
                price=Decimal(price),
                image=f"https://img.test/{name}.png",
                **kw,
            )
            s.add(item)
            await s.flush()
            if categories:
                await s.execute(
                    item_categories.insert(),
                    [{"item_id": item.id, "category_id": c.id} for c in categories],
                )
            await s.commit()
        return item

    async def user(self, user_id: int, credits: str = "100") -> User:
        return await self._save(User(user_id=user_id, credits=Decimal(credits)))

    async def inventory(self, user: User, item: Item, total: int, in_bag: int = 0) -> Inventory:
        return await self._save(
            Inventory(user_id=user.id, item_id=item.id, total_quantity=total, quantity_in_bag=in_bag)
        )


@pytest.fixture
def seed(session_maker) -> Seeder:
    return Seeder(session_maker)
