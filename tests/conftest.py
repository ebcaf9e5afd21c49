import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault('APP_ENV', 'test')
os.environ.setdefault('STORAGE_BACKEND', 'memory')
os.environ.setdefault('ANTHROPIC_API_KEY', 'x')
for name in (
    'LEMON_SQUEEZY_API_KEY',
    'LEMON_SQUEEZY_STORE_ID',
    'LEMON_SQUEEZY_WEBHOOK_SECRET',
    'SERVERLESS',
    'VERCEL',
):
    os.environ.pop(name, None)

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_humanizer_service
from app.config import Settings, get_settings
from app.main import app
from app.services.storage_backends import MemoryUserBackend
from app.services.user_store import UserStore, get_user_store


class FakeHumanizer:
    """Stands in for the LLM-backed service and records every call."""

    def __init__(self, text='Rewritten text.', percentage=42):
        self.text = text
        self.percentage = percentage
        self.calls = []

    async def humanize(self, text, tone='Standard'):
        self.calls.append(('humanize', text, tone))
        return self.text

    async def detect_ai_percentage(self, text):
        self.calls.append(('detect', text))
        return self.percentage


@pytest.fixture
def store():
    return UserStore(backend=MemoryUserBackend())


@pytest.fixture
def fake_humanizer():
    return FakeHumanizer()


@pytest.fixture
def use_settings():
    def _use(**overrides):
        overrides.setdefault('storage_backend', 'memory')
        configured = Settings(**overrides)
        app.dependency_overrides[get_settings] = lambda: configured
        return configured

    return _use


@pytest.fixture
def client(store, fake_humanizer, use_settings):
    use_settings()
    app.dependency_overrides[get_user_store] = lambda: store
    app.dependency_overrides[get_humanizer_service] = lambda: fake_humanizer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
