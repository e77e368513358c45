"""Global test fixtures and utilities for fitness tracker tests"""
import pytest
from unittest.mock import patch
from datetime import datetime, timedelta, timezone

from src.models.goal import Goal, GoalType, GoalUnit
from tests.fakes import InMemoryStore


# Modules that read storage through `from src.db import queries`
QUERY_CONSUMERS = [
    "src.services.goal_service",
    "src.services.health_analysis",
    "src.gamification.streak_system",
    "src.gamification.achievement_system",
]


# ============================================================================
# Clock Fixtures
# ============================================================================

class FrozenClock:
    """Controllable replacement for datetime_helpers.now_utc()"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, now: datetime) -> datetime:
        self.now = now
        return self.now


@pytest.fixture
def frozen_clock():
    """Pin the wall clock to 2024-03-15 10:00 UTC (advance with clock.advance(days=1))"""
    clock = FrozenClock(datetime(2024, 3, 15, 10, 0, 0, tzinfo=timezone.utc))
    with patch("src.utils.datetime_helpers.now_utc", clock):
        yield clock


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def fake_store():
    """In-memory store patched in place of src.db.queries everywhere it is used"""
    store = InMemoryStore()
    patchers = [patch(f"{module}.queries", store) for module in QUERY_CONSUMERS]
    for patcher in patchers:
        patcher.start()
    yield store
    for patcher in reversed(patchers):
        patcher.stop()


# ============================================================================
# User & Auth Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def other_user_id():
    """A second user who owns nothing of test_user_id's"""
    return "user-456"


@pytest.fixture
def test_api_key():
    """Standard test API key"""
    return "test_api_key_12345"


# ============================================================================
# Goal Fixtures
# ============================================================================

@pytest.fixture
def make_goal(frozen_clock, test_user_id):
    """
    Factory for goals dated relative to the frozen clock

    Defaults: 0 -> 100 times, started 10 days ago, due in 20 days, active.
    """
    def _make_goal(**overrides) -> Goal:
        now = frozen_clock.now
        fields = {
            "user_id": test_user_id,
            "goal_type": GoalType.EXERCISE_FREQUENCY,
            "title": "Work out 100 times",
            "target_value": 100,
            "start_value": 0,
            "current_value": 0,
            "unit": GoalUnit.TIMES,
            "start_date": now - timedelta(days=10),
            "target_date": now + timedelta(days=20),
            "created_at": now - timedelta(days=10),
            "updated_at": now - timedelta(days=10),
        }
        fields.update(overrides)
        return Goal(**fields)

    return _make_goal
