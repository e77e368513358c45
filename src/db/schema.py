"""
Database schema bootstrap

Creates the tables this service owns (goals, user_streaks, achievements,
health_metrics) and minimal versions of the tables other services own but we
read (exercises, meals, profiles). Safe to call on every startup.
"""

import logging
from src.db.connection import db

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS goals (
        id UUID PRIMARY KEY,
        user_id TEXT NOT NULL,
        goal_type TEXT NOT NULL,
        title VARCHAR(100) NOT NULL,
        description VARCHAR(500),
        target_value DOUBLE PRECISION NOT NULL,
        current_value DOUBLE PRECISION NOT NULL DEFAULT 0,
        start_value DOUBLE PRECISION NOT NULL DEFAULT 0,
        unit TEXT NOT NULL,
        custom_unit VARCHAR(20),
        start_date TIMESTAMPTZ NOT NULL,
        target_date TIMESTAMPTZ NOT NULL,
        completed_date TIMESTAMPTZ,
        status TEXT NOT NULL DEFAULT 'active',
        progress_percentage DOUBLE PRECISION NOT NULL DEFAULT 0,
        milestones JSONB NOT NULL DEFAULT '[]',
        progress_history JSONB NOT NULL DEFAULT '[]',
        reminder_enabled BOOLEAN NOT NULL DEFAULT TRUE,
        reminder_time TEXT,
        reminder_days JSONB NOT NULL DEFAULT '[]',
        category TEXT NOT NULL DEFAULT 'fitness',
        priority TEXT NOT NULL DEFAULT 'medium',
        is_public BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_goals_user_status ON goals (user_id, status, target_date)",
    "CREATE INDEX IF NOT EXISTS idx_goals_user_type ON goals (user_id, goal_type)",
    """
    CREATE TABLE IF NOT EXISTS user_streaks (
        user_id TEXT PRIMARY KEY,
        current_count INTEGER NOT NULL DEFAULT 0,
        current_start_date DATE,
        current_last_activity_date DATE,
        longest_count INTEGER NOT NULL DEFAULT 0,
        longest_start_date DATE,
        longest_end_date DATE,
        total_active_days INTEGER NOT NULL DEFAULT 0,
        exercise_streak JSONB NOT NULL DEFAULT '{}',
        meal_logging_streak JSONB NOT NULL DEFAULT '{}',
        goal_progress_streak JSONB NOT NULL DEFAULT '{}',
        streak_milestones_achieved JSONB NOT NULL DEFAULT '[]',
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS achievements (
        id UUID PRIMARY KEY,
        user_id TEXT NOT NULL,
        badge_id TEXT NOT NULL,
        badge_type TEXT NOT NULL,
        name TEXT NOT NULL,
        description VARCHAR(200),
        icon TEXT NOT NULL DEFAULT '🏆',
        tier TEXT NOT NULL DEFAULT 'bronze',
        criteria_value DOUBLE PRECISION NOT NULL,
        earned_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        related_goal_id UUID,
        related_data JSONB,
        is_visible BOOLEAN NOT NULL DEFAULT TRUE,
        is_featured BOOLEAN NOT NULL DEFAULT FALSE,
        CONSTRAINT uq_achievements_user_badge UNIQUE (user_id, badge_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_achievements_user_earned ON achievements (user_id, earned_at DESC)",
    """
    CREATE TABLE IF NOT EXISTS health_metrics (
        id UUID PRIMARY KEY,
        user_id TEXT NOT NULL,
        metric_type TEXT NOT NULL,
        value JSONB NOT NULL,
        notes VARCHAR(500),
        measured_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_health_metrics_lookup ON health_metrics (user_id, metric_type, measured_at DESC)",
    # Owned by the exercise/meal/profile services, created here so a fresh
    # database can boot on its own
    """
    CREATE TABLE IF NOT EXISTS exercises (
        id UUID PRIMARY KEY,
        user_id TEXT NOT NULL,
        date TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS meals (
        id UUID PRIMARY KEY,
        user_id TEXT NOT NULL,
        date TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS profiles (
        user_id TEXT PRIMARY KEY,
        gender TEXT
    )
    """,
]


async def init_schema() -> None:
    """Create tables and indexes if they don't exist"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                await cur.execute(statement)
            await conn.commit()
    logger.info(f"Database schema ready ({len(SCHEMA_STATEMENTS)} statements applied)")
