"""Unit tests for database queries (src/db/queries/)"""
import pytest
import json
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

from src.db import queries
from src.models.achievement import Achievement, AchievementTier, BadgeType
from src.models.goal import Goal, GoalType, GoalUnit
from src.models.health_metric import parse_health_metric
from src.models.streak import Streak

NOW = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_cursor():
    return AsyncMock()


@pytest.fixture
def mock_conn(mock_cursor):
    conn = MagicMock()
    conn.cursor.return_value.__aenter__.return_value = mock_cursor
    conn.commit = AsyncMock()
    return conn


@pytest.fixture
def mock_db(mock_conn):
    """Patch the shared Database instance's connection() context manager"""
    with patch("src.db.connection.db.connection") as connection:
        connection.return_value.__aenter__.return_value = mock_conn
        yield connection


def sample_goal(**overrides) -> Goal:
    fields = {
        "user_id": "user-123",
        "goal_type": GoalType.WEIGHT_LOSS,
        "title": "Lose 5 kg",
        "target_value": 80,
        "start_value": 85,
        "current_value": 85,
        "unit": GoalUnit.KG,
        "target_date": datetime(2024, 6, 1, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return Goal(**fields)


# ============================================================================
# Goal Query Tests
# ============================================================================

@pytest.mark.asyncio
async def test_create_goal_serializes_json_columns(mock_db, mock_conn, mock_cursor):
    goal = sample_goal(reminder_days=["monday"])

    await queries.create_goal(goal)

    sql, params = mock_cursor.execute.call_args[0]
    assert "INSERT INTO goals" in sql
    assert params["id"] == goal.id
    assert json.loads(params["reminder_days"]) == ["monday"]
    assert json.loads(params["progress_history"]) == []
    mock_conn.commit.assert_called_once()


@pytest.mark.asyncio
async def test_get_goal_found(mock_db, mock_cursor):
    goal = sample_goal()
    mock_cursor.fetchone.return_value = goal.model_dump()

    result = await queries.get_goal(goal.id)

    assert result.id == goal.id
    assert result.title == "Lose 5 kg"


@pytest.mark.asyncio
async def test_get_goal_missing(mock_db, mock_cursor):
    mock_cursor.fetchone.return_value = None

    assert await queries.get_goal(uuid4()) is None


@pytest.mark.asyncio
async def test_find_goals_filters_and_order(mock_db, mock_cursor):
    mock_cursor.fetchall.return_value = []

    await queries.find_goals("user-123", status="active", priority="high")

    sql, params = mock_cursor.execute.call_args[0]
    assert "AND status = %s" in sql
    assert "AND priority = %s" in sql
    assert "goal_type = %s" not in sql
    assert "ORDER BY" in sql
    assert params == ("user-123", "active", "high")


@pytest.mark.asyncio
async def test_count_goals(mock_db, mock_cursor):
    mock_cursor.fetchone.return_value = {"count": 3}

    assert await queries.count_goals("user-123", status="completed") == 3
    assert mock_cursor.execute.call_args[0][1] == ("user-123", "completed")


@pytest.mark.asyncio
async def test_update_goal_single_statement(mock_db, mock_conn, mock_cursor):
    await queries.update_goal(sample_goal())

    mock_cursor.execute.assert_called_once()
    assert "UPDATE goals" in mock_cursor.execute.call_args[0][0]
    mock_conn.commit.assert_called_once()


# ============================================================================
# Streak Query Tests
# ============================================================================

def streak_row(**overrides) -> dict:
    row = {
        "user_id": "user-123",
        "current_count": 3,
        "current_start_date": date(2024, 3, 13),
        "current_last_activity_date": date(2024, 3, 15),
        "longest_count": 5,
        "longest_start_date": date(2024, 1, 1),
        "longest_end_date": date(2024, 1, 5),
        "total_active_days": 12,
        "exercise_streak": None,
        "meal_logging_streak": None,
        "goal_progress_streak": None,
        "streak_milestones_achieved": None,
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


@pytest.mark.asyncio
async def test_get_user_streak_existing(mock_db, mock_cursor):
    mock_cursor.fetchone.return_value = streak_row()

    streak = await queries.get_user_streak("user-123")

    assert streak.current_streak.count == 3
    assert streak.longest_streak.end_date == date(2024, 1, 5)
    assert streak.total_active_days == 12
    mock_cursor.execute.assert_called_once()


@pytest.mark.asyncio
async def test_get_user_streak_creates_row(mock_db, mock_conn, mock_cursor):
    mock_cursor.fetchone.side_effect = [
        None,
        streak_row(current_count=0, current_start_date=None, current_last_activity_date=None,
                   longest_count=0, longest_start_date=None, longest_end_date=None, total_active_days=0),
    ]

    streak = await queries.get_user_streak("user-123")

    assert streak.current_streak.count == 0
    assert "ON CONFLICT (user_id)" in mock_cursor.execute.call_args_list[1][0][0]
    mock_conn.commit.assert_called_once()


@pytest.mark.asyncio
async def test_find_user_streak_does_not_create(mock_db, mock_conn, mock_cursor):
    mock_cursor.fetchone.return_value = None

    assert await queries.find_user_streak("user-123") is None
    mock_cursor.execute.assert_called_once()
    mock_conn.commit.assert_not_called()


@pytest.mark.asyncio
async def test_update_user_streak(mock_db, mock_cursor):
    streak = Streak(user_id="user-123")
    streak.current_streak.count = 4

    await queries.update_user_streak(streak)

    params = mock_cursor.execute.call_args[0][1]
    assert params[0] == 4
    assert params[-1] == "user-123"


# ============================================================================
# Achievement Query Tests
# ============================================================================

def sample_achievement() -> Achievement:
    return Achievement(
        user_id="user-123",
        badge_id="streak_7",
        badge_type=BadgeType.STREAK_MILESTONE,
        name="Week Warrior",
        tier=AchievementTier.BRONZE,
        criteria_value=7,
        earned_at=NOW
    )


@pytest.mark.asyncio
async def test_insert_achievement_new(mock_db, mock_cursor):
    achievement = sample_achievement()
    mock_cursor.fetchone.return_value = achievement.model_dump()

    stored = await queries.insert_achievement_if_absent(achievement)

    assert stored.badge_id == "streak_7"
    assert "ON CONFLICT (user_id, badge_id) DO NOTHING" in mock_cursor.execute.call_args[0][0]


@pytest.mark.asyncio
async def test_insert_achievement_duplicate(mock_db, mock_cursor):
    mock_cursor.fetchone.return_value = None

    assert await queries.insert_achievement_if_absent(sample_achievement()) is None


@pytest.mark.asyncio
async def test_get_user_achievements_filters(mock_db, mock_cursor):
    mock_cursor.fetchall.return_value = [sample_achievement().model_dump()]

    result = await queries.get_user_achievements("user-123", tier="bronze")

    sql, params = mock_cursor.execute.call_args[0]
    assert "AND tier = %s" in sql
    assert "ORDER BY earned_at DESC" in sql
    assert params == ("user-123", "bronze")
    assert len(result) == 1


# ============================================================================
# Tracking Query Tests
# ============================================================================

@pytest.mark.asyncio
async def test_save_health_metric(mock_db, mock_conn, mock_cursor):
    metric = parse_health_metric({
        "user_id": "user-123", "metric_type": "heart_rate", "value": {"bpm": 64}, "measured_at": NOW
    })

    await queries.save_health_metric(metric)

    params = mock_cursor.execute.call_args[0][1]
    assert params[2] == "heart_rate"
    assert json.loads(params[3]) == {"bpm": 64}
    mock_conn.commit.assert_called_once()


@pytest.mark.asyncio
async def test_get_latest_metric_parses_variant(mock_db, mock_cursor):
    mock_cursor.fetchone.return_value = {
        "id": uuid4(), "user_id": "user-123", "metric_type": "blood_pressure",
        "value": {"systolic": 120, "diastolic": 80}, "notes": None, "measured_at": NOW,
    }

    metric = await queries.get_latest_metric("user-123", "blood_pressure")

    assert metric.value.systolic == 120
    assert "LIMIT 1" in mock_cursor.execute.call_args[0][0]


@pytest.mark.asyncio
async def test_count_exercises_window(mock_db, mock_cursor):
    mock_cursor.fetchone.return_value = {"count": 7}
    start = datetime(2024, 3, 15, tzinfo=timezone.utc)
    end = datetime(2024, 3, 15, 8, tzinfo=timezone.utc)

    assert await queries.count_exercises("user-123", start=start, end=end) == 7

    sql, params = mock_cursor.execute.call_args[0]
    assert "date >= %s" in sql and "date < %s" in sql
    assert params == ("user-123", start, end)


@pytest.mark.asyncio
async def test_get_user_gender_no_profile(mock_db, mock_cursor):
    mock_cursor.fetchone.return_value = None

    assert await queries.get_user_gender("user-123") is None
