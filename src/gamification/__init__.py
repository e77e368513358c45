"""
Gamification for the fitness tracker

- Activity streaks on UTC calendar days
- Badge issuance (streak, goal completion, logging counts, special badges)
"""

from src.gamification.streak_system import check_and_update_streak, check_streak_milestones, get_streak
from src.gamification.achievement_system import (
    award_streak_badges,
    award_goal_completion_badge,
    check_and_award_badges,
    get_achievements,
)

__all__ = [
    "check_and_update_streak",
    "check_streak_milestones",
    "get_streak",
    "award_streak_badges",
    "award_goal_completion_badge",
    "check_and_award_badges",
    "get_achievements",
]
