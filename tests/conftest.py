# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
import os

from interview_assistant.core.exceptions import ServiceError
from interview_assistant.core.interfaces import CompletionService


class FakeCompletion(CompletionService):
    """Returns queued replies in order; queued exceptions are raised instead."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise ServiceError("no reply queued", http_status=500, body="")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def test_env_vars():
    """Set up test environment variables."""
    os.environ["ENVIRONMENT"] = "testing"
    os.environ["DEBUG"] = "true"
    os.environ["APP_NAME"] = "Interview Assistant Test"
    os.environ["PERSIST_STATE"] = "false"
    os.environ["TIMER_TICK_SECONDS"] = "3600"
    yield
    # Clean up
    for key in ("ENVIRONMENT", "DEBUG", "APP_NAME", "PERSIST_STATE", "TIMER_TICK_SECONDS"):
        os.environ.pop(key, None)


@pytest.fixture
def settings(test_env_vars):
    """Get test settings."""
    from interview_assistant.core.config import get_settings
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def completion():
    return FakeCompletion()


@pytest.fixture
def evaluator(completion):
    from interview_assistant.managers.evaluation import OpenAIInterviewManager
    return OpenAIInterviewManager(completion)


@pytest.fixture
def store():
    from interview_assistant.storage.json_store import MemoryStateStore
    return MemoryStateStore()


@pytest.fixture
def flow(evaluator, store):
    from interview_assistant.application.interview_session import InterviewFlow
    return InterviewFlow(evaluator=evaluator, store=store)


@pytest.fixture
def app(settings, flow):
    """Create test app instance."""
    from interview_assistant.interface.api.main import create_app
    return create_app(settings, flow)


@pytest.fixture
def client(app):
    """Create test client."""
    with TestClient(app) as test_client:
        yield test_client
