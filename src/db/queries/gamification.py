"""Gamification database queries (streaks and achievements)"""
import json
import logging
from typing import Optional
from uuid import UUID
from src.db.connection import db
from src.models.streak import Streak
from src.models.achievement import Achievement

logger = logging.getLogger(__name__)


# ==========================================
# Streak System Functions
# ==========================================

STREAK_COLUMNS = """
    user_id, current_count, current_start_date, current_last_activity_date,
    longest_count, longest_start_date, longest_end_date, total_active_days,
    exercise_streak, meal_logging_streak, goal_progress_streak,
    streak_milestones_achieved, created_at, updated_at
"""


def _row_to_streak(row: dict) -> Streak:
    return Streak.model_validate({
        "user_id": row["user_id"],
        "current_streak": {
            "count": row["current_count"],
            "start_date": row["current_start_date"],
            "last_activity_date": row["current_last_activity_date"],
        },
        "longest_streak": {
            "count": row["longest_count"],
            "start_date": row["longest_start_date"],
            "end_date": row["longest_end_date"],
        },
        "total_active_days": row["total_active_days"],
        "exercise_streak": row["exercise_streak"] or {},
        "meal_logging_streak": row["meal_logging_streak"] or {},
        "goal_progress_streak": row["goal_progress_streak"] or {},
        "streak_milestones_achieved": row["streak_milestones_achieved"] or [],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    })


async def find_user_streak(user_id: str) -> Optional[Streak]:
    """Get the user's streak record without creating one"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"SELECT {STREAK_COLUMNS} FROM user_streaks WHERE user_id = %s",
                (user_id,)
            )
            row = await cur.fetchone()
            return _row_to_streak(row) if row else None


async def get_user_streak(user_id: str) -> Streak:
    """
    Get the user's streak record (creates if doesn't exist)

    Returns:
        Streak with all counts at 0 for a brand-new user
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"SELECT {STREAK_COLUMNS} FROM user_streaks WHERE user_id = %s",
                (user_id,)
            )
            row = await cur.fetchone()

            if not row:
                # ON CONFLICT covers two first-activity requests racing each other
                await cur.execute(
                    f"""
                    INSERT INTO user_streaks (user_id)
                    VALUES (%s)
                    ON CONFLICT (user_id) DO UPDATE SET user_id = EXCLUDED.user_id
                    RETURNING {STREAK_COLUMNS}
                    """,
                    (user_id,)
                )
                row = await cur.fetchone()
                await conn.commit()
                logger.info(f"Created new streak record for user {user_id}")

            return _row_to_streak(row)


async def update_user_streak(streak: Streak) -> None:
    """
    Update streak data

    Last write wins: two concurrent streak checks for one user read the same
    record and the later write overwrites the earlier one. Not covered by
    tests.

    Args:
        streak: Full streak record; every column is overwritten
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                UPDATE user_streaks
                SET current_count = %s,
                    current_start_date = %s,
                    current_last_activity_date = %s,
                    longest_count = %s,
                    longest_start_date = %s,
                    longest_end_date = %s,
                    total_active_days = %s,
                    exercise_streak = %s::jsonb,
                    meal_logging_streak = %s::jsonb,
                    goal_progress_streak = %s::jsonb,
                    streak_milestones_achieved = %s::jsonb,
                    updated_at = CURRENT_TIMESTAMP
                WHERE user_id = %s
                """,
                (
                    streak.current_streak.count,
                    streak.current_streak.start_date,
                    streak.current_streak.last_activity_date,
                    streak.longest_streak.count,
                    streak.longest_streak.start_date,
                    streak.longest_streak.end_date,
                    streak.total_active_days,
                    streak.exercise_streak.model_dump_json(),
                    streak.meal_logging_streak.model_dump_json(),
                    streak.goal_progress_streak.model_dump_json(),
                    json.dumps([m.model_dump(mode="json") for m in streak.streak_milestones_achieved]),
                    streak.user_id,
                )
            )
            await conn.commit()


# ==========================================
# Achievement System Functions
# ==========================================

ACHIEVEMENT_COLUMNS = """
    id, user_id, badge_id, badge_type, name, description, icon, tier, criteria_value,
    earned_at, related_goal_id, related_data, is_visible, is_featured
"""


def _row_to_achievement(row: dict) -> Achievement:
    return Achievement.model_validate(dict(row))


async def insert_achievement_if_absent(achievement: Achievement) -> Optional[Achievement]:
    """
    Insert an achievement unless the user already holds that badge_id

    The (user_id, badge_id) unique constraint makes this safe under
    concurrent awards: exactly one insert wins, the rest return None.

    Returns:
        The stored achievement, or None if the badge already existed
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                INSERT INTO achievements ({ACHIEVEMENT_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s::jsonb, %s, %s)
                ON CONFLICT (user_id, badge_id) DO NOTHING
                RETURNING {ACHIEVEMENT_COLUMNS}
                """,
                (
                    achievement.id,
                    achievement.user_id,
                    achievement.badge_id,
                    achievement.badge_type.value,
                    achievement.name,
                    achievement.description,
                    achievement.icon,
                    achievement.tier.value,
                    achievement.criteria_value,
                    achievement.earned_at,
                    achievement.related_goal_id,
                    json.dumps(achievement.related_data) if achievement.related_data is not None else None,
                    achievement.is_visible,
                    achievement.is_featured,
                )
            )
            row = await cur.fetchone()
            await conn.commit()
            return _row_to_achievement(row) if row else None


async def get_achievement_by_id(achievement_id: UUID) -> Optional[Achievement]:
    """Get achievement by primary key (any owner)"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"SELECT {ACHIEVEMENT_COLUMNS} FROM achievements WHERE id = %s",
                (achievement_id,)
            )
            row = await cur.fetchone()
            return _row_to_achievement(row) if row else None


async def get_user_achievements(
    user_id: str,
    badge_type: Optional[str] = None,
    tier: Optional[str] = None
) -> list[Achievement]:
    """
    Get a user's achievements, newest first

    Args:
        user_id: Owner
        badge_type: Optional badge type filter
        tier: Optional tier filter
    """
    query = f"SELECT {ACHIEVEMENT_COLUMNS} FROM achievements WHERE user_id = %s"
    params: list = [user_id]
    if badge_type is not None:
        query += " AND badge_type = %s"
        params.append(badge_type)
    if tier is not None:
        query += " AND tier = %s"
        params.append(tier)
    query += " ORDER BY earned_at DESC"

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, tuple(params))
            rows = await cur.fetchall()
            return [_row_to_achievement(row) for row in rows]


async def delete_achievement(achievement_id: UUID) -> None:
    """Delete an achievement (admin/testing path)"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute("DELETE FROM achievements WHERE id = %s", (achievement_id,))
            await conn.commit()
    logger.info(f"Deleted achievement {achievement_id}")
