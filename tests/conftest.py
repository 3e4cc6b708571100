import httpx
import pytest
from fastapi.testclient import TestClient

from app.bitrix import api
from app.core.config import settings
from app.main import app
from tests.bitrix.helpers import WEBHOOK_BASE, FakeBitrix

API_KEY = 'test-api-key'


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Known API key and webhook for every test"""
    monkeypatch.setattr(settings, 'api_key', API_KEY)
    monkeypatch.setattr(settings, 'bitrix_webhook_base', WEBHOOK_BASE)
    monkeypatch.setattr(settings, 'bitrix_label_lang', 'es')


@pytest.fixture(autouse=True)
def reset_bitrix_client():
    """Reset the Bitrix API client before each test"""
    api._client = None
    yield
    api._client = None


@pytest.fixture
def fake_bitrix():
    """A fake portal wired into the Bitrix client through httpx.MockTransport"""
    fake = FakeBitrix()
    api._client = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
    return fake


@pytest.fixture(name='client')
def client_fixture():
    """Create a test client"""
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {'Authorization': f'Bearer {API_KEY}'}
