"""
Shared BDD fixtures and steps. Scenarios talk to the app only over HTTP.
Each request runs on its own event loop under TestClient, so the database is a
file with no connection pooling.
"""

import pytest
from fastapi.testclient import TestClient
from pytest_bdd import parsers, then, when
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from forumshop.config import get_settings
from forumshop.db.base import Base
from forumshop.db.session import get_db
from forumshop.main import app


@pytest.fixture
def api(tmp_path, settings, api_headers):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bdd.db'}", poolclass=NullPool)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with session_maker() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    client = TestClient(app, headers=api_headers)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def context():
    """Last response and ids created by given steps."""
    return {"items": {}}


@when(parsers.parse('I request "{method}" "{path}"'))
def request_path(api, context, method, path):
    context["response"] = api.request(method, path)


@then(parsers.parse("the response status should be {status:d}"))
def response_status(context, status):
    assert context["response"].status_code == status, context["response"].text


@then(parsers.parse('the response error should be "{message}"'))
def response_error(context, message):
    assert context["response"].json() == {"error": message}
