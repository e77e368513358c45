"""
Database queries - re-export all functions so callers can do
``from src.db import queries`` and use ``queries.get_goal(...)``.

Module organization:
- goals.py: Goal records (progress, milestones and history live on the row)
- gamification.py: Streak records and achievements
- tracking.py: Health metrics, exercise/meal counts, profile lookups
"""

# Goal operations
from src.db.queries.goals import (
    create_goal,
    get_goal,
    update_goal,
    delete_goal,
    find_goals,
    count_goals,
)

# Gamification operations
from src.db.queries.gamification import (
    find_user_streak,
    get_user_streak,
    update_user_streak,
    insert_achievement_if_absent,
    get_achievement_by_id,
    get_user_achievements,
    delete_achievement,
)

# Tracking operations
from src.db.queries.tracking import (
    save_health_metric,
    get_latest_metric,
    get_metric_history,
    count_exercises,
    count_meals,
    get_user_gender,
)

__all__ = [
    # Goals
    "create_goal",
    "get_goal",
    "update_goal",
    "delete_goal",
    "find_goals",
    "count_goals",
    # Gamification
    "find_user_streak",
    "get_user_streak",
    "update_user_streak",
    "insert_achievement_if_absent",
    "get_achievement_by_id",
    "get_user_achievements",
    "delete_achievement",
    # Tracking
    "save_health_metric",
    "get_latest_metric",
    "get_metric_history",
    "count_exercises",
    "count_meals",
    "get_user_gender",
]
