"""Achievement models for gamification"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, Any
from datetime import datetime
from uuid import UUID, uuid4

from src.utils.datetime_helpers import now_utc


class BadgeType(str, Enum):
    """Badge categories"""
    STREAK_MILESTONE = "streak_milestone"
    GOAL_COMPLETION = "goal_completion"
    DISTANCE_MILESTONE = "distance_milestone"
    EXERCISE_MILESTONE = "exercise_milestone"
    MEAL_MILESTONE = "meal_milestone"
    WEIGHT_MILESTONE = "weight_milestone"
    CONSISTENCY_BADGE = "consistency_badge"
    EARLY_BIRD = "early_bird"
    NIGHT_OWL = "night_owl"
    HYDRATION_HERO = "hydration_hero"
    STEP_MASTER = "step_master"
    FIRST_ACHIEVEMENT = "first_achievement"
    COMEBACK_KID = "comeback_kid"
    PERFECTIONIST = "perfectionist"
    CUSTOM = "custom"


class AchievementTier(str, Enum):
    """Achievement tiers/difficulty levels"""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    DIAMOND = "diamond"


class BadgeDefinition(BaseModel):
    """Everything needed to issue a badge, minus who earned it and when"""
    badge_id: str
    badge_type: BadgeType
    name: str
    description: Optional[str] = Field(default=None, max_length=200)
    icon: str = "🏆"
    tier: AchievementTier = AchievementTier.BRONZE
    criteria_value: float
    related_goal_id: Optional[UUID] = None
    related_data: Optional[dict[str, Any]] = None


class Achievement(BadgeDefinition):
    """Badge earned by a user"""
    id: UUID = Field(default_factory=uuid4)
    user_id: str
    earned_at: datetime = Field(default_factory=now_utc)
    is_visible: bool = True
    is_featured: bool = False

    @classmethod
    def from_definition(cls, user_id: str, badge: BadgeDefinition, earned_at: datetime) -> "Achievement":
        return cls(user_id=user_id, earned_at=earned_at, **badge.model_dump())
