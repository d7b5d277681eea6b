import pytest
from fastapi.testclient import TestClient

from app import create_app
from dispatcher import Dispatcher
from settings import Settings
from tests.fakes import FakeProvider, FakeStore


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def dispatcher(provider):
    return Dispatcher(provider, summary_language="English")


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def settings():
    return Settings(gemini_api_key="test-key", summary_language="English")


@pytest.fixture
def client(settings, dispatcher, store):
    app = create_app(settings=settings, dispatcher=dispatcher, conversation_store=store)
    return TestClient(app)
