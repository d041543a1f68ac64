import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from config.settings import get_settings
from students.store import StudentStore
from summarizer.summarizer import SummarizerConnectionError


class FakeSummarizer:
    def __init__(self, text="A cheerful student.", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def summarize(self, student):
        self.calls.append(student)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def store():
    return StudentStore()


@pytest.fixture
def summarizer():
    return FakeSummarizer()


@pytest.fixture
def client(store, summarizer):
    return TestClient(create_app(store=store, summarizer=summarizer))


@pytest.fixture
def failing_client(store):
    summarizer = FakeSummarizer(
        error=SummarizerConnectionError("failed to call Ollama API: connection refused")
    )
    return TestClient(create_app(store=store, summarizer=summarizer))


@pytest.fixture
def fresh_settings():
    """Clear the cached settings around a test that changes the environment."""
    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()
