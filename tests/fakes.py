"""In-memory stand-in for src.db.queries

Implements the same async functions as the query package, backed by dicts,
so services and gamification modules can be exercised without PostgreSQL.
Records are deep-copied on the way in and out, like rows from a database.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.models.achievement import Achievement
from src.models.goal import Goal, PRIORITY_RANK
from src.models.streak import Streak
from src.utils.datetime_helpers import ensure_utc


class InMemoryStore:
    """Fake persistence layer keyed the same way as the SQL tables"""

    def __init__(self):
        self.goals: dict[UUID, Goal] = {}
        self.streaks: dict[str, Streak] = {}
        self.achievements: dict[UUID, Achievement] = {}
        self.metrics: list = []
        self.exercises: list[tuple[str, datetime]] = []
        self.meals: dict[str, int] = {}
        self.genders: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def log_exercise(self, user_id: str, at: datetime) -> None:
        self.exercises.append((user_id, ensure_utc(at)))

    def log_meals(self, user_id: str, count: int) -> None:
        self.meals[user_id] = self.meals.get(user_id, 0) + count

    def set_gender(self, user_id: str, gender: str) -> None:
        self.genders[user_id] = gender

    def add_goal(self, goal: Goal) -> Goal:
        self.goals[goal.id] = goal.model_copy(deep=True)
        return goal

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    async def create_goal(self, goal: Goal) -> None:
        self.goals[goal.id] = goal.model_copy(deep=True)

    async def get_goal(self, goal_id: UUID) -> Optional[Goal]:
        goal = self.goals.get(goal_id)
        return goal.model_copy(deep=True) if goal else None

    async def update_goal(self, goal: Goal) -> None:
        if goal.id in self.goals:
            self.goals[goal.id] = goal.model_copy(deep=True)

    async def delete_goal(self, goal_id: UUID) -> None:
        self.goals.pop(goal_id, None)

    async def find_goals(
        self,
        user_id: str,
        status: Optional[str] = None,
        goal_type: Optional[str] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None
    ) -> list[Goal]:
        goals = [
            g for g in self.goals.values()
            if g.user_id == user_id
            and (status is None or g.status == status)
            and (goal_type is None or g.goal_type == goal_type)
            and (category is None or g.category == category)
            and (priority is None or g.priority == priority)
        ]
        goals.sort(key=lambda g: (-PRIORITY_RANK[g.priority], ensure_utc(g.target_date)))
        return [g.model_copy(deep=True) for g in goals]

    async def count_goals(self, user_id: str, status: Optional[str] = None) -> int:
        return len(await self.find_goals(user_id, status=status))

    # ------------------------------------------------------------------
    # Streaks
    # ------------------------------------------------------------------

    async def find_user_streak(self, user_id: str) -> Optional[Streak]:
        streak = self.streaks.get(user_id)
        return streak.model_copy(deep=True) if streak else None

    async def get_user_streak(self, user_id: str) -> Streak:
        if user_id not in self.streaks:
            self.streaks[user_id] = Streak(user_id=user_id)
        return self.streaks[user_id].model_copy(deep=True)

    async def update_user_streak(self, streak: Streak) -> None:
        self.streaks[streak.user_id] = streak.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Achievements
    # ------------------------------------------------------------------

    async def insert_achievement_if_absent(self, achievement: Achievement) -> Optional[Achievement]:
        for existing in self.achievements.values():
            if existing.user_id == achievement.user_id and existing.badge_id == achievement.badge_id:
                return None
        self.achievements[achievement.id] = achievement.model_copy(deep=True)
        return achievement.model_copy(deep=True)

    async def get_achievement_by_id(self, achievement_id: UUID) -> Optional[Achievement]:
        achievement = self.achievements.get(achievement_id)
        return achievement.model_copy(deep=True) if achievement else None

    async def get_user_achievements(
        self,
        user_id: str,
        badge_type: Optional[str] = None,
        tier: Optional[str] = None
    ) -> list[Achievement]:
        achievements = [
            a for a in self.achievements.values()
            if a.user_id == user_id
            and (badge_type is None or a.badge_type == badge_type)
            and (tier is None or a.tier == tier)
        ]
        achievements.sort(key=lambda a: a.earned_at, reverse=True)
        return [a.model_copy(deep=True) for a in achievements]

    async def delete_achievement(self, achievement_id: UUID) -> None:
        self.achievements.pop(achievement_id, None)

    # ------------------------------------------------------------------
    # Health metrics and activity logs
    # ------------------------------------------------------------------

    async def save_health_metric(self, metric) -> None:
        self.metrics.append(metric.model_copy(deep=True))

    async def get_latest_metric(self, user_id: str, metric_type: str, since: Optional[datetime] = None):
        readings = [
            m for m in self.metrics
            if m.user_id == user_id and m.metric_type == metric_type
            and (since is None or ensure_utc(m.measured_at) >= since)
        ]
        if not readings:
            return None
        return max(readings, key=lambda m: ensure_utc(m.measured_at)).model_copy(deep=True)

    async def get_metric_history(self, user_id: str, metric_type: str, since: datetime) -> list:
        readings = [
            m for m in self.metrics
            if m.user_id == user_id and m.metric_type == metric_type
            and ensure_utc(m.measured_at) >= since
        ]
        readings.sort(key=lambda m: ensure_utc(m.measured_at))
        return [m.model_copy(deep=True) for m in readings]

    async def count_exercises(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> int:
        return sum(
            1 for owner, at in self.exercises
            if owner == user_id
            and (start is None or at >= start)
            and (end is None or at < end)
        )

    async def count_meals(self, user_id: str) -> int:
        return self.meals.get(user_id, 0)

    async def get_user_gender(self, user_id: str) -> Optional[str]:
        return self.genders.get(user_id)
