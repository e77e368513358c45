"""Goal models"""
from enum import Enum
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4
from pydantic import BaseModel, Field, field_validator

from src.utils.datetime_helpers import now_utc


class GoalType(str, Enum):
    """What a goal measures"""
    WEIGHT_LOSS = "weight_loss"
    WEIGHT_GAIN = "weight_gain"
    MUSCLE_GAIN = "muscle_gain"
    BODY_FAT_REDUCTION = "body_fat_reduction"
    DISTANCE_RUNNING = "distance_running"
    EXERCISE_DURATION = "exercise_duration"
    EXERCISE_FREQUENCY = "exercise_frequency"
    STEPS_DAILY = "steps_daily"
    WATER_INTAKE = "water_intake"
    SLEEP_HOURS = "sleep_hours"
    CALORIE_INTAKE = "calorie_intake"
    STRENGTH_MILESTONE = "strength_milestone"
    CUSTOM = "custom"


class GoalUnit(str, Enum):
    KG = "kg"
    LBS = "lbs"
    KM = "km"
    MILES = "miles"
    MINUTES = "minutes"
    HOURS = "hours"
    TIMES = "times"
    STEPS = "steps"
    LITERS = "liters"
    CALORIES = "calories"
    PERCENTAGE = "percentage"
    CUSTOM = "custom"


class GoalStatus(str, Enum):
    """Goal lifecycle states"""
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    ABANDONED = "abandoned"


# Statuses a user may set directly; completion only happens through progress
USER_SETTABLE_STATUSES = {GoalStatus.ACTIVE, GoalStatus.PAUSED, GoalStatus.ABANDONED}


class GoalCategory(str, Enum):
    FITNESS = "fitness"
    NUTRITION = "nutrition"
    HEALTH = "health"
    LIFESTYLE = "lifestyle"


class GoalPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


PRIORITY_RANK = {GoalPriority.HIGH: 2, GoalPriority.MEDIUM: 1, GoalPriority.LOW: 0}

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class Milestone(BaseModel):
    """Sub-target inside a goal's progress range"""
    title: str
    target_value: float
    achieved: bool = False
    achieved_date: Optional[datetime] = None


class ProgressEntry(BaseModel):
    """Snapshot of a progress update"""
    value: float
    recorded_at: datetime = Field(default_factory=now_utc)
    note: Optional[str] = None


class Goal(BaseModel):
    """User-defined fitness goal with progress tracking"""
    id: UUID = Field(default_factory=uuid4)
    user_id: str
    goal_type: GoalType
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)

    target_value: float
    current_value: float = 0
    start_value: float = 0
    unit: GoalUnit
    custom_unit: Optional[str] = Field(default=None, max_length=20)

    start_date: datetime = Field(default_factory=now_utc)
    target_date: datetime
    completed_date: Optional[datetime] = None

    status: GoalStatus = GoalStatus.ACTIVE
    progress_percentage: float = Field(default=0, ge=0, le=100)
    milestones: list[Milestone] = Field(default_factory=list)
    progress_history: list[ProgressEntry] = Field(default_factory=list)

    reminder_enabled: bool = True
    reminder_time: Optional[str] = Field(default=None, pattern=r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
    reminder_days: list[str] = Field(default_factory=lambda: list(WEEKDAYS))

    category: GoalCategory = GoalCategory.FITNESS
    priority: GoalPriority = GoalPriority.MEDIUM
    is_public: bool = False

    created_at: datetime = Field(default_factory=now_utc)
    updated_at: datetime = Field(default_factory=now_utc)

    @field_validator("title", "description", "custom_unit")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v

    @field_validator("reminder_days")
    @classmethod
    def validate_reminder_days(cls, v: list[str]) -> list[str]:
        invalid = [day for day in v if day not in WEEKDAYS]
        if invalid:
            raise ValueError(f"Invalid reminder days: {', '.join(invalid)}")
        return v
