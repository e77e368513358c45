"""
Activity Streak Tracking

One streak record per user, evaluated on UTC calendar days:
- same day as the last activity: no change
- the next day: streak continues (+1)
- any longer gap: streak resets to 1

The longest streak only ever grows. A broken streak never overwrites a
higher historical record.
"""

from datetime import date
from typing import List
import logging

from src.db import queries
from src.models.streak import CurrentStreak, LongestStreak, Streak, StreakUpdate
from src.utils import datetime_helpers

logger = logging.getLogger(__name__)

# Streak lengths that earn a badge
STREAK_MILESTONES = [7, 14, 30, 60, 100, 180, 365]


def advance_streak(streak: Streak, today: date) -> bool:
    """
    Apply one day's activity to a streak record in place

    Args:
        streak: The user's streak record
        today: UTC calendar day of the activity

    Returns:
        True if the record changed (False for a repeat activity on the same day)
    """
    current = streak.current_streak

    # First activity ever
    if current.last_activity_date is None:
        streak.current_streak = CurrentStreak(count=1, start_date=today, last_activity_date=today)
        streak.total_active_days = 1
        if streak.longest_streak.count == 0:
            streak.longest_streak = LongestStreak(count=1, start_date=today, end_date=today)
        return True

    day_gap = datetime_helpers.days_between(current.last_activity_date, today)

    if day_gap <= 0:
        # Already counted today
        return False

    if day_gap == 1:
        current.count += 1
        current.last_activity_date = today
        streak.total_active_days += 1

        if current.count > streak.longest_streak.count:
            streak.longest_streak = LongestStreak(
                count=current.count,
                start_date=current.start_date,
                end_date=today
            )
        return True

    # Gap of two or more days: streak broken
    logger.info(
        f"User {streak.user_id} streak broken. "
        f"Was {current.count}, gap was {day_gap} days"
    )
    streak.current_streak = CurrentStreak(count=1, start_date=today, last_activity_date=today)
    streak.total_active_days += 1
    return True


async def get_streak(user_id: str) -> Streak:
    """Get the user's streak record, creating an empty one on first access"""
    return await queries.get_user_streak(user_id)


async def check_and_update_streak(user_id: str) -> StreakUpdate:
    """
    Record today's activity against the user's streak

    Read-modify-write without locking; concurrent calls for one user can
    lose an update (see queries.update_user_streak).

    Returns:
        StreakUpdate with streak_updated False when today was already counted
    """
    streak = await queries.get_user_streak(user_id)
    today = datetime_helpers.today_utc()

    changed = advance_streak(streak, today)

    if changed:
        streak.updated_at = datetime_helpers.now_utc()
        await queries.update_user_streak(streak)
        logger.info(
            f"Updated streak for user {user_id}: "
            f"current={streak.current_streak.count}, longest={streak.longest_streak.count}"
        )

    return StreakUpdate(
        streak_updated=changed,
        current_streak=streak.current_streak.count,
        longest_streak=streak.longest_streak.count,
        total_active_days=streak.total_active_days
    )


def check_streak_milestones(streak_count: int) -> List[int]:
    """
    Milestones hit exactly by this streak count

    Returns:
        [streak_count] if it is a milestone, else []

    Examples:
        >>> check_streak_milestones(7)
        [7]
        >>> check_streak_milestones(8)
        []
    """
    return [m for m in STREAK_MILESTONES if m == streak_count]
