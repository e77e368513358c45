"""Goal database queries"""
import json
import logging
from typing import Optional
from uuid import UUID
from src.db.connection import db
from src.models.goal import Goal

logger = logging.getLogger(__name__)

GOAL_COLUMNS = """
    id, user_id, goal_type, title, description, target_value, current_value, start_value,
    unit, custom_unit, start_date, target_date, completed_date, status, progress_percentage,
    milestones, progress_history, reminder_enabled, reminder_time, reminder_days,
    category, priority, is_public, created_at, updated_at
"""

# high > medium > low, then soonest deadline first
GOAL_ORDER_BY = """
    ORDER BY CASE priority WHEN 'high' THEN 2 WHEN 'medium' THEN 1 ELSE 0 END DESC,
             target_date ASC
"""


def _goal_params(goal: Goal) -> dict:
    data = goal.model_dump(mode="json")
    for key in ("milestones", "progress_history", "reminder_days"):
        data[key] = json.dumps(data[key])
    data["id"] = goal.id
    return data


def _row_to_goal(row: dict) -> Goal:
    return Goal.model_validate(dict(row))


async def create_goal(goal: Goal) -> None:
    """Insert a new goal"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                INSERT INTO goals ({GOAL_COLUMNS})
                VALUES (
                    %(id)s, %(user_id)s, %(goal_type)s, %(title)s, %(description)s, %(target_value)s,
                    %(current_value)s, %(start_value)s, %(unit)s, %(custom_unit)s, %(start_date)s,
                    %(target_date)s, %(completed_date)s, %(status)s, %(progress_percentage)s,
                    %(milestones)s::jsonb, %(progress_history)s::jsonb, %(reminder_enabled)s,
                    %(reminder_time)s, %(reminder_days)s::jsonb, %(category)s, %(priority)s,
                    %(is_public)s, %(created_at)s, %(updated_at)s
                )
                """,
                _goal_params(goal)
            )
            await conn.commit()
    logger.info(f"Created goal {goal.id} for user {goal.user_id}")


async def get_goal(goal_id: UUID) -> Optional[Goal]:
    """Get goal by id (any owner)"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"SELECT {GOAL_COLUMNS} FROM goals WHERE id = %s",
                (goal_id,)
            )
            row = await cur.fetchone()
            return _row_to_goal(row) if row else None


async def update_goal(goal: Goal) -> None:
    """
    Persist the whole goal record in one statement

    Milestones and progress history live on the same row, so a progress
    update is never half-written.

    Last write wins: callers read, modify and write back without a lock or
    version check, so two concurrent updates to one goal can lose one of
    them (progress entry included). Not covered by tests.
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                UPDATE goals
                SET goal_type = %(goal_type)s,
                    title = %(title)s,
                    description = %(description)s,
                    target_value = %(target_value)s,
                    current_value = %(current_value)s,
                    start_value = %(start_value)s,
                    unit = %(unit)s,
                    custom_unit = %(custom_unit)s,
                    start_date = %(start_date)s,
                    target_date = %(target_date)s,
                    completed_date = %(completed_date)s,
                    status = %(status)s,
                    progress_percentage = %(progress_percentage)s,
                    milestones = %(milestones)s::jsonb,
                    progress_history = %(progress_history)s::jsonb,
                    reminder_enabled = %(reminder_enabled)s,
                    reminder_time = %(reminder_time)s,
                    reminder_days = %(reminder_days)s::jsonb,
                    category = %(category)s,
                    priority = %(priority)s,
                    is_public = %(is_public)s,
                    updated_at = %(updated_at)s
                WHERE id = %(id)s
                """,
                _goal_params(goal)
            )
            await conn.commit()


async def delete_goal(goal_id: UUID) -> None:
    """Hard delete a goal"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute("DELETE FROM goals WHERE id = %s", (goal_id,))
            await conn.commit()
    logger.info(f"Deleted goal {goal_id}")


async def find_goals(
    user_id: str,
    status: Optional[str] = None,
    goal_type: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[str] = None
) -> list[Goal]:
    """
    Get a user's goals with optional filters

    Returns:
        Goals ordered by priority (high first) then target date
    """
    query = f"SELECT {GOAL_COLUMNS} FROM goals WHERE user_id = %s"
    params: list = [user_id]

    for column, value in (
        ("status", status),
        ("goal_type", goal_type),
        ("category", category),
        ("priority", priority),
    ):
        if value is not None:
            query += f" AND {column} = %s"
            params.append(value)

    query += GOAL_ORDER_BY

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, tuple(params))
            rows = await cur.fetchall()
            return [_row_to_goal(row) for row in rows]


async def count_goals(user_id: str, status: Optional[str] = None) -> int:
    """Count a user's goals, optionally by status"""
    query = "SELECT COUNT(*) AS count FROM goals WHERE user_id = %s"
    params: list = [user_id]
    if status is not None:
        query += " AND status = %s"
        params.append(status)

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, tuple(params))
            row = await cur.fetchone()
            return row["count"] if row else 0
