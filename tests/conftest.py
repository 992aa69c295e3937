"""Pytest configuration and fixtures."""

import os
import tempfile

import pytest

# Settings are cached when the app module is imported, so the test
# environment must be in place before any test module imports it.
_TEST_DATA_DIR = tempfile.mkdtemp(prefix="profile-assistant-tests-")
os.environ["PROFILE_ASSISTANT_ENV"] = "test"
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["PERSONAL_DATA_API_KEY"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PROFILE_DATA_PATH"] = os.path.join(_TEST_DATA_DIR, "personal_data.json")

from fastapi.testclient import TestClient  # noqa: E402

from profile_assistant.context.context_window import ContextWindow, get_context_window  # noqa: E402
from profile_assistant.core.llm import get_completion_client  # noqa: E402
from profile_assistant.db.profile_store import ProfileStore, get_profile_store  # noqa: E402
from profile_assistant.main import app  # noqa: E402
from tests.fakes.fake_llm import FakeCompletionClient  # noqa: E402


@pytest.fixture
def store(tmp_path):
    """Initialized profile store in a temp directory (placeholder document)."""
    s = ProfileStore(tmp_path / "personal_data.json")
    s.initialize()
    return s


@pytest.fixture
def empty_store(tmp_path):
    """Profile store with nothing written yet."""
    return ProfileStore(tmp_path / "personal_data.json")


@pytest.fixture
def context_window():
    return ContextWindow(max_turns=10)


@pytest.fixture
def fake_llm():
    return FakeCompletionClient(reply="Hi")


@pytest.fixture
def api_client(store, context_window):
    """TestClient wired to temp store and fresh context window, demo mode."""
    app.dependency_overrides[get_profile_store] = lambda: store
    app.dependency_overrides[get_context_window] = lambda: context_window
    app.dependency_overrides[get_completion_client] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def live_api_client(store, context_window, fake_llm):
    """TestClient with a configured (fake) language model."""
    app.dependency_overrides[get_profile_store] = lambda: store
    app.dependency_overrides[get_context_window] = lambda: context_window
    app.dependency_overrides[get_completion_client] = lambda: fake_llm
    yield TestClient(app)
    app.dependency_overrides.clear()
