"""
Achievement System

Issues badges and reports on them. Badge families:
- Streak milestones (7 through 365 consecutive days)
- Goal completion (one badge per completed goal)
- Exercise and meal logging counts
- Special badges: first goal, early bird, perfectionist

Every award goes through award_if_absent(): a user holds at most one
achievement per badge_id, so re-running a check never duplicates a badge.
"""

from datetime import timedelta
from typing import Dict, List, Optional
from uuid import UUID
import logging

from src.db import queries
from src.exceptions import AuthorizationError, RecordNotFoundError
from src.models.achievement import Achievement, AchievementTier, BadgeDefinition, BadgeType
from src.models.goal import Goal, GoalStatus
from src.utils import datetime_helpers
from src.utils.goal_progress import is_on_track

logger = logging.getLogger(__name__)

# streak length -> (name, tier, icon)
STREAK_BADGES: Dict[int, tuple] = {
    7: ("Week Warrior", AchievementTier.BRONZE, "🔥"),
    14: ("Two Week Champion", AchievementTier.SILVER, "🌟"),
    30: ("Monthly Master", AchievementTier.GOLD, "🏆"),
    60: ("Two Month Hero", AchievementTier.GOLD, "💎"),
    100: ("Century Club", AchievementTier.PLATINUM, "👑"),
    180: ("Half Year Legend", AchievementTier.PLATINUM, "🎖️"),
    365: ("Year Long Champion", AchievementTier.DIAMOND, "🌠"),
}

EXERCISE_MILESTONES = [10, 50, 100, 250, 500]
MEAL_MILESTONES = [50, 100, 250, 500, 1000]

EARLY_BIRD_CUTOFF_HOUR = 8
EARLY_BIRD_REQUIRED = 7
PERFECTIONIST_MIN_GOALS = 3


def get_tier_by_milestone(milestone: int) -> AchievementTier:
    """
    Tier for a count-based milestone

    Examples:
        >>> get_tier_by_milestone(50)
        <AchievementTier.SILVER: 'silver'>
        >>> get_tier_by_milestone(1000)
        <AchievementTier.DIAMOND: 'diamond'>
    """
    if milestone >= 500:
        return AchievementTier.DIAMOND
    if milestone >= 250:
        return AchievementTier.PLATINUM
    if milestone >= 100:
        return AchievementTier.GOLD
    if milestone >= 50:
        return AchievementTier.SILVER
    return AchievementTier.BRONZE


# ==========================================
# Badge definitions
# ==========================================

def streak_badge(days: int) -> BadgeDefinition:
    name, tier, icon = STREAK_BADGES[days]
    return BadgeDefinition(
        badge_id=f"streak_{days}",
        badge_type=BadgeType.STREAK_MILESTONE,
        name=name,
        description=f"Maintained a {days}-day activity streak",
        icon=icon,
        tier=tier,
        criteria_value=days
    )


def goal_completion_badge(goal: Goal) -> BadgeDefinition:
    return BadgeDefinition(
        badge_id=f"goal_completed_{goal.id}",
        badge_type=BadgeType.GOAL_COMPLETION,
        name="Goal Achieved!",
        description=f"Successfully completed the goal: {goal.title}"[:200],
        icon="🎯",
        tier=AchievementTier.GOLD,
        criteria_value=goal.target_value,
        related_goal_id=goal.id,
        related_data={"goal_type": goal.goal_type.value, "title": goal.title}
    )


def exercise_badge(count: int) -> BadgeDefinition:
    return BadgeDefinition(
        badge_id=f"exercise_{count}",
        badge_type=BadgeType.EXERCISE_MILESTONE,
        name=f"{count} Workouts",
        description=f"Logged {count} exercise sessions",
        icon="💪",
        tier=get_tier_by_milestone(count),
        criteria_value=count
    )


def meal_badge(count: int) -> BadgeDefinition:
    return BadgeDefinition(
        badge_id=f"meal_{count}",
        badge_type=BadgeType.MEAL_MILESTONE,
        name=f"{count} Meals Logged",
        description=f"Tracked {count} meals",
        icon="🍽️",
        tier=get_tier_by_milestone(count),
        criteria_value=count
    )


FIRST_GOAL_BADGE = BadgeDefinition(
    badge_id="first_goal",
    badge_type=BadgeType.FIRST_ACHIEVEMENT,
    name="First Goal Achieved",
    description="Completed your first fitness goal",
    icon="🎉",
    tier=AchievementTier.BRONZE,
    criteria_value=1
)

EARLY_BIRD_BADGE = BadgeDefinition(
    badge_id="early_bird",
    badge_type=BadgeType.EARLY_BIRD,
    name="Early Bird",
    description="Exercised before 8 AM for 7 days",
    icon="🌅",
    tier=AchievementTier.SILVER,
    criteria_value=EARLY_BIRD_REQUIRED
)


def perfectionist_badge(active_goal_count: int) -> BadgeDefinition:
    return BadgeDefinition(
        badge_id="perfectionist",
        badge_type=BadgeType.PERFECTIONIST,
        name="Perfectionist",
        description="All goals on track or ahead",
        icon="✨",
        tier=AchievementTier.GOLD,
        criteria_value=active_goal_count
    )


def badge_catalogue() -> List[BadgeDefinition]:
    """Every automatically-awarded badge (per-goal completion badges excluded)"""
    return (
        [streak_badge(days) for days in STREAK_BADGES]
        + [exercise_badge(n) for n in EXERCISE_MILESTONES]
        + [meal_badge(n) for n in MEAL_MILESTONES]
        + [FIRST_GOAL_BADGE, EARLY_BIRD_BADGE, perfectionist_badge(PERFECTIONIST_MIN_GOALS)]
    )


# ==========================================
# Awarding
# ==========================================

async def award_if_absent(user_id: str, badge: BadgeDefinition) -> Optional[Achievement]:
    """
    Award a badge unless the user already has it

    Returns:
        The new Achievement, or None if the badge was already held
    """
    achievement = Achievement.from_definition(user_id, badge, earned_at=datetime_helpers.now_utc())
    stored = await queries.insert_achievement_if_absent(achievement)

    if stored is None:
        logger.debug(f"User {user_id} already holds badge {badge.badge_id}")
        return None

    logger.info(f"User {user_id} earned badge: {badge.badge_id} ({badge.name}, {badge.tier.value})")
    return stored


async def award_streak_badges(user_id: str, milestones: List[int]) -> List[Achievement]:
    """Award the badge for each streak milestone reached"""
    new_badges = []
    for days in milestones:
        if days not in STREAK_BADGES:
            continue
        badge = await award_if_absent(user_id, streak_badge(days))
        if badge:
            new_badges.append(badge)
    return new_badges


async def award_goal_completion_badge(user_id: str, goal: Goal) -> Optional[Achievement]:
    """Award the one-per-goal completion badge"""
    return await award_if_absent(user_id, goal_completion_badge(goal))


async def _count_early_exercises(user_id: str) -> int:
    """Exercises logged today between 00:00 and 08:00 UTC"""
    day_start = datetime_helpers.get_day_start_utc(datetime_helpers.today_utc())
    return await queries.count_exercises(
        user_id,
        start=day_start,
        end=day_start + timedelta(hours=EARLY_BIRD_CUTOFF_HOUR)
    )


async def check_and_award_badges(user_id: str) -> List[Achievement]:
    """
    Evaluate every count-based and special badge rule for a user

    Count milestones fire only when the running total equals the milestone
    exactly.

    Returns:
        Newly awarded achievements (empty if nothing new)
    """
    candidates: List[BadgeDefinition] = []

    completed_goals = await queries.count_goals(user_id, status=GoalStatus.COMPLETED.value)
    if completed_goals == 1:
        candidates.append(FIRST_GOAL_BADGE)

    total_exercises = await queries.count_exercises(user_id)
    candidates.extend(exercise_badge(n) for n in EXERCISE_MILESTONES if total_exercises == n)

    total_meals = await queries.count_meals(user_id)
    candidates.extend(meal_badge(n) for n in MEAL_MILESTONES if total_meals == n)

    if await _count_early_exercises(user_id) >= EARLY_BIRD_REQUIRED:
        candidates.append(EARLY_BIRD_BADGE)

    active_goals = await queries.find_goals(user_id, status=GoalStatus.ACTIVE.value)
    now = datetime_helpers.now_utc()
    if len(active_goals) >= PERFECTIONIST_MIN_GOALS and all(is_on_track(g, now) for g in active_goals):
        candidates.append(perfectionist_badge(len(active_goals)))

    new_badges = []
    for badge in candidates:
        awarded = await award_if_absent(user_id, badge)
        if awarded:
            new_badges.append(awarded)

    logger.info(f"Badge check for user {user_id}: {len(new_badges)} new")
    return new_badges


# ==========================================
# Reporting
# ==========================================

async def get_achievements(
    user_id: str,
    badge_type: Optional[str] = None,
    tier: Optional[str] = None
) -> List[Achievement]:
    """User's achievements, newest first, optionally filtered"""
    return await queries.get_user_achievements(user_id, badge_type=badge_type, tier=tier)


async def get_achievement_stats(user_id: str) -> Dict:
    """
    Summary of a user's achievements

    Returns:
        {
            'total': int,
            'by_type': {badge_type: count},
            'by_tier': {tier: count} (every tier present, zeros included),
            'recent': [Achievement] (5 newest)
        }
    """
    achievements = await queries.get_user_achievements(user_id)

    by_type: Dict[str, int] = {}
    for achievement in achievements:
        key = achievement.badge_type.value
        by_type[key] = by_type.get(key, 0) + 1

    by_tier = {
        tier.value: sum(1 for a in achievements if a.tier == tier)
        for tier in AchievementTier
    }

    recent = sorted(achievements, key=lambda a: a.earned_at, reverse=True)[:5]

    return {
        "total": len(achievements),
        "by_type": by_type,
        "by_tier": by_tier,
        "recent": recent,
    }


async def get_available_badges(user_id: str) -> Dict:
    """
    Badge catalogue with the user's earned flags

    Returns:
        {'total': int, 'earned': int, 'remaining': int, 'badges': [dict]}
    """
    achievements = await queries.get_user_achievements(user_id)
    earned_ids = {a.badge_id for a in achievements}

    badges = []
    for badge in badge_catalogue():
        entry = badge.model_dump(mode="json", exclude={"related_goal_id", "related_data"})
        entry["earned"] = badge.badge_id in earned_ids
        badges.append(entry)

    earned_count = sum(1 for b in badges if b["earned"])
    return {
        "total": len(badges),
        "earned": earned_count,
        "remaining": len(badges) - earned_count,
        "badges": badges,
    }


async def delete_achievement(user_id: str, achievement_id: UUID) -> None:
    """Delete one of the user's achievements"""
    achievement = await queries.get_achievement_by_id(achievement_id)

    if achievement is None:
        raise RecordNotFoundError(
            "Achievement not found",
            record_type="achievement",
            record_id=str(achievement_id),
            user_id=user_id,
            operation="delete_achievement"
        )

    if achievement.user_id != user_id:
        raise AuthorizationError(
            "Not authorized to delete this achievement",
            resource="achievement",
            user_id=user_id,
            operation="delete_achievement"
        )

    await queries.delete_achievement(achievement_id)
