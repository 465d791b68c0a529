"""Shared test fixtures and configuration."""
import sys
import os

# Ensure the server package is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set required environment variables BEFORE any application module is imported.
# These are dummy values used only in tests.
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-for-unit-tests")

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402

from core.pending_actions import PendingActionStore  # noqa: E402
from core.session_context import SessionTrail  # noqa: E402
from database.client import Workspace  # noqa: E402
from tools.base import ToolExecutionContext  # noqa: E402
from tools.catalog import build_registry  # noqa: E402
from tools.dispatcher import ToolDispatcher  # noqa: E402

FIXED_NOW = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def workspace():
    return Workspace()


@pytest.fixture
def registry(workspace):
    return build_registry(workspace)


@pytest.fixture
def dispatcher(registry):
    return ToolDispatcher(registry)


@pytest.fixture
def ctx():
    return ToolExecutionContext(user_id="user-1", now_iso=FIXED_NOW.isoformat())


@pytest.fixture
def pending_store():
    store = PendingActionStore(clock=lambda: FIXED_NOW)
    yield store
    store.clear()


@pytest.fixture
def session_trail():
    trail = SessionTrail(clock=lambda: FIXED_NOW)
    yield trail
    trail.clear_all()
