import os

# Configure test environment before the app is imported
os.environ.setdefault('STORE_BACKEND', 'memory')
os.environ.setdefault('BCRYPT_ROUNDS', '4')
os.environ.setdefault('JWT_SECRET', 'test-secret')

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from blogcms.main import app  # noqa: E402
from blogcms.core import get_store  # noqa: E402
from blogcms.storage import MemoryStore  # noqa: E402


@pytest_asyncio.fixture
async def store():
    return MemoryStore()


@pytest_asyncio.fixture
async def client(store):
    app.dependency_overrides[get_store] = lambda: store
    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def login_as(client):
    """Register a user and return a token for it"""
    async def _login_as(username, password='secret123'):
        r = await client.post('/api/register', json={'username': username, 'password': password})
        assert r.status_code == 201, r.text
        login = await client.post('/api/login', json={'username': username, 'password': password})
        assert login.status_code == 200, login.text
        return login.json()['token']
    return _login_as


@pytest_asyncio.fixture
async def token(login_as):
    return await login_as('alice', 'alice123')
