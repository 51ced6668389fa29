# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import pytest
from datetime import date
from typing import List, Tuple
from unittest.mock import AsyncMock, MagicMock

from learning_core.auth.session import AuthSession, AuthState, AuthStateManager
from learning_core.data.memory_backend import InMemoryBackend
from learning_core.models.entities import Category, Topic, TopicStatus
from learning_core.services.learning_context import LearningContext
from learning_core.sync.seed import SeedDataset, default_seed

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


# =============================================================================
# NOTIFIER / IDENTITY
# =============================================================================

class RecordingNotifier:
    """Collects notifications instead of showing them"""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    @property
    def errors(self) -> List[str]:
        return [m for level, m in self.messages if level == "error"]

    @property
    def successes(self) -> List[str]:
        return [m for level, m in self.messages if level == "success"]

    def clear(self) -> None:
        self.messages.clear()


class StaticIdentity:
    """Async identity provider whose answer the test controls"""

    def __init__(self, user_id=USER_ID):
        self.user_id = user_id
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return self.user_id


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def identity():
    return StaticIdentity()


@pytest.fixture
def backend():
    return InMemoryBackend()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def seed():
    return default_seed()


@pytest.fixture
def small_seed():
    """One category with one topic"""
    category = Category(id="seed-cat", name="Seed Category", order=0)
    topic = Topic(id="seed-topic", title="Seed Topic", category_id="seed-cat")
    return SeedDataset(topics=(topic,), categories=(category,))


@pytest.fixture
def sample_topic():
    return Topic(
        id="t-1",
        title="Rust Basics",
        category_id="c-1",
        description="Ownership and borrowing",
        status=TopicStatus.IN_PROGRESS,
        progress=40,
        start_date=date(2024, 1, 10),
    )


def topic_row(topic_id, category_id, user_id=USER_ID, title="Remote Topic", **extra):
    """Row as stored in the topics table"""
    row = {
        "id": topic_id,
        "title": title,
        "description": "",
        "category": category_id,
        "category_id": category_id,
        "status": "Not Started",
        "progress": 0,
        "start_date": None,
        "target_end_date": None,
        "parent_id": None,
        "created_at": "2024-05-01T10:00:00+00:00",
        "updated_at": "2024-05-01T10:00:00+00:00",
        "user_id": user_id,
    }
    row.update(extra)
    return row


@pytest.fixture
def make_topic_row():
    return topic_row


def category_row(category_id, order, user_id=USER_ID, name=None, is_active=True):
    return {
        "id": category_id,
        "name": name or f"Category {category_id}",
        "order": order,
        "is_active": is_active,
        "created_at": "2024-05-01T10:00:00+00:00",
        "updated_at": "2024-05-01T10:00:00+00:00",
        "user_id": user_id,
    }


@pytest.fixture
def make_category_row():
    return category_row


# =============================================================================
# AUTH / CONTEXT FIXTURES
# =============================================================================

@pytest.fixture
def signed_in_state():
    return AuthState(is_loading=False, session=AuthSession(user_id=USER_ID))


@pytest.fixture
def auth_manager():
    """Auth manager whose check is still loading"""
    return AuthStateManager()


@pytest.fixture
def signed_in_auth(signed_in_state):
    return AuthStateManager(initial=signed_in_state)


@pytest.fixture
def make_context(backend, notifier):
    """Build a LearningContext over the in-memory backend"""

    def _make(auth=None, seed=None, **kwargs):
        ctx = LearningContext(
            backend,
            auth or AuthStateManager(),
            notifier=notifier,
            seed=seed if seed is not None else SeedDataset.empty(),
            **kwargs,
        )
        return ctx

    return _make


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_streamlit():
    """Mock Streamlit for testing"""
    import sys

    # Create mock streamlit module
    mock_st = MagicMock()
    mock_st.session_state = {}
    mock_st.secrets = {}

    # Store original and replace
    original_st = sys.modules.get('streamlit')
    sys.modules['streamlit'] = mock_st

    yield mock_st

    # Restore original
    if original_st:
        sys.modules['streamlit'] = original_st
    else:
        del sys.modules['streamlit']


@pytest.fixture
def mock_supabase():
    """Mock async Supabase client (query builders are sync, execute() is awaited)"""
    mock_client = MagicMock()
    query = mock_client.table.return_value
    for method in ("select", "eq", "order", "range", "insert", "update", "delete"):
        getattr(query, method).return_value = query
    query.execute = AsyncMock(return_value=MagicMock(data=[]))

    channel = mock_client.channel.return_value
    channel.subscribe = AsyncMock(return_value=channel)
    mock_client.remove_channel = AsyncMock()

    mock_client.auth.get_session = AsyncMock(return_value=None)
    mock_client.auth.get_user = AsyncMock(return_value=None)
    return mock_client
