import os

import pytest
import pytest_asyncio
from httpx import ASGITransport

from custom_search.models import async_drop_db, init_db_connection, init_db
from custom_search.nonces import NonceManager

TEST_SECRET_KEY = "test-secret-key"
TEST_ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
def nonces():
    return NonceManager(TEST_SECRET_KEY, lifetime=86400)


@pytest_asyncio.fixture
async def test_db(tmp_path):
    """Create a test database and handle setup/teardown"""
    test_db_url = os.getenv(
        "CUSTOM_SEARCH_TEST_DATABASE_URL",
        f"sqlite+aiosqlite:///{tmp_path / 'custom_search_test.db'}",
    )

    # Initialize test database connection
    test_engine, test_session_local = init_db_connection(test_db_url)

    # Initialize schema
    await init_db(test_engine)

    yield test_session_local

    # Cleanup
    await async_drop_db(test_engine)
    await test_engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_db):
    """Get a database session for testing."""
    async with test_db() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@pytest_asyncio.fixture
async def test_client(test_db, nonces, monkeypatch):
    from httpx import AsyncClient

    from custom_search.app import app
    from custom_search.nonces import get_nonce_manager

    monkeypatch.setenv("CUSTOM_SEARCH_ADMIN_TOKEN", TEST_ADMIN_TOKEN)
    app.dependency_overrides[get_nonce_manager] = lambda: nonces

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": TEST_ADMIN_TOKEN}


@pytest_asyncio.fixture
async def posts(db_session):
    """A small site: articles, pages and trend alerts, some unpublished."""
    from custom_search.models import create_post

    rows = [
        dict(post_type="post", post_title="Summer SALE starts now", post_content="Everything must go."),
        dict(post_type="post", post_title="Weekly digest", post_content="Our annual sale is back."),
        dict(post_type="post", post_title="Draft sale notes", post_content="", post_status="draft"),
        dict(post_type="page", post_title="Sale terms", post_content="Terms for the sale."),
        dict(post_type="page", post_title="About us", post_content="Who we are."),
        dict(post_type="trend-alert", post_title="Q3 report is out", post_content="Numbers are up."),
        dict(post_type="trend-alert", post_title="Market watch", post_content="See the q3 REPORT for details."),
        dict(post_type="trend-alert", post_title="Q3 report preview", post_content="", post_status="private"),
        dict(post_type="post", post_title="Quarterly numbers", post_content="The Q3 report for posts."),
        dict(post_type="post", post_title="100% off", post_content="Literal percent in title."),
        dict(post_type="post", post_title="1000 offers", post_content="No percent sign here."),
    ]
    created = {}
    for row in rows:
        post = await create_post(db_session, **row)
        created[post.post_title] = post
    await db_session.commit()
    return created
