"""Health metric and activity-log database queries"""
import json
import logging
from typing import Optional
from datetime import datetime
from src.db.connection import db
from src.models.health_metric import parse_health_metric

logger = logging.getLogger(__name__)

METRIC_COLUMNS = "id, user_id, metric_type, value, notes, measured_at"


# Health metric operations
async def save_health_metric(metric) -> None:
    """Save a validated health metric reading"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO health_metrics (id, user_id, metric_type, value, notes, measured_at)
                VALUES (%s, %s, %s, %s::jsonb, %s, %s)
                """,
                (
                    metric.id,
                    metric.user_id,
                    metric.metric_type,
                    json.dumps(metric.value.model_dump()),
                    metric.notes,
                    metric.measured_at
                )
            )
            await conn.commit()
    logger.info(f"Saved {metric.metric_type} metric for user {metric.user_id}")


async def get_latest_metric(
    user_id: str,
    metric_type: str,
    since: Optional[datetime] = None
):
    """Most recent reading of one metric type (optionally no older than `since`)"""
    query = f"SELECT {METRIC_COLUMNS} FROM health_metrics WHERE user_id = %s AND metric_type = %s"
    params: list = [user_id, metric_type]
    if since is not None:
        query += " AND measured_at >= %s"
        params.append(since)
    query += " ORDER BY measured_at DESC LIMIT 1"

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, tuple(params))
            row = await cur.fetchone()
            return parse_health_metric(dict(row)) if row else None


async def get_metric_history(user_id: str, metric_type: str, since: datetime) -> list:
    """Readings of one metric type since `since`, oldest first"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {METRIC_COLUMNS} FROM health_metrics
                WHERE user_id = %s AND metric_type = %s AND measured_at >= %s
                ORDER BY measured_at ASC
                """,
                (user_id, metric_type, since)
            )
            rows = await cur.fetchall()
            return [parse_health_metric(dict(row)) for row in rows]


# Activity logs (owned by the exercise/meal services, read-only here)
async def count_exercises(
    user_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None
) -> int:
    """Count logged exercises, optionally within [start, end)"""
    query = "SELECT COUNT(*) AS count FROM exercises WHERE user_id = %s"
    params: list = [user_id]
    if start is not None:
        query += " AND date >= %s"
        params.append(start)
    if end is not None:
        query += " AND date < %s"
        params.append(end)

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, tuple(params))
            row = await cur.fetchone()
            return row["count"] if row else 0


async def count_meals(user_id: str) -> int:
    """Count logged meals"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "SELECT COUNT(*) AS count FROM meals WHERE user_id = %s",
                (user_id,)
            )
            row = await cur.fetchone()
            return row["count"] if row else 0


async def get_user_gender(user_id: str) -> Optional[str]:
    """Gender from the user's profile, if set"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "SELECT gender FROM profiles WHERE user_id = %s",
                (user_id,)
            )
            row = await cur.fetchone()
            return row["gender"] if row else None
