import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.routers.rest import get_messaging
from tests.helpers.fake_messaging import FakeMessagingClient


@pytest.fixture
def messaging_client():
    """Fake messaging client injected in place of Firebase."""
    fake = FakeMessagingClient()
    app.dependency_overrides[get_messaging] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client(messaging_client):
    """Sync TestClient, lifespan is not run so Firebase is never initialized."""
    return TestClient(app)


@pytest.fixture
async def async_client(messaging_client):
    """Async HTTP client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
