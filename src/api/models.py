"""Pydantic models for API request/response validation

Request bodies only check types. Domain rules (title length, allowed
statuses, metric value shapes) are enforced by the services so that they
come back as 400 ValidationError responses.
"""
from typing import Optional, List, Dict, Any
from uuid import UUID
from pydantic import BaseModel, Field
from datetime import datetime

from src.models.achievement import Achievement
from src.models.goal import Goal, GoalCategory, GoalPriority, GoalType, GoalUnit, ProgressEntry
from src.models.streak import StreakUpdate


# ==========================================
# Goals
# ==========================================

class GoalCreateRequest(BaseModel):
    """Request to create a goal"""
    goal_type: GoalType = Field(..., description="What the goal measures")
    title: str = Field(..., description="Goal title (1-100 characters)")
    description: Optional[str] = Field(default=None, description="Optional description")
    target_value: float = Field(..., description="Value that completes the goal")
    current_value: Optional[float] = Field(default=None, description="Current value (defaults to 0)")
    start_value: Optional[float] = Field(
        default=None,
        description="Baseline for progress (defaults to current_value)"
    )
    unit: GoalUnit
    custom_unit: Optional[str] = None
    start_date: Optional[datetime] = None
    target_date: datetime = Field(..., description="Deadline, must be in the future")
    reminder_enabled: Optional[bool] = None
    reminder_time: Optional[str] = Field(default=None, description="HH:MM")
    reminder_days: Optional[List[str]] = None
    category: Optional[GoalCategory] = None
    priority: Optional[GoalPriority] = None
    is_public: Optional[bool] = None


class GoalUpdateRequest(BaseModel):
    """General edit of a goal; omitted fields are left unchanged"""
    goal_type: Optional[GoalType] = None
    title: Optional[str] = None
    description: Optional[str] = None
    target_value: Optional[float] = None
    current_value: Optional[float] = None
    start_value: Optional[float] = None
    unit: Optional[GoalUnit] = None
    custom_unit: Optional[str] = None
    start_date: Optional[datetime] = None
    target_date: Optional[datetime] = None
    reminder_enabled: Optional[bool] = None
    reminder_time: Optional[str] = None
    reminder_days: Optional[List[str]] = None
    category: Optional[GoalCategory] = None
    priority: Optional[GoalPriority] = None
    is_public: Optional[bool] = None


class ProgressUpdateRequest(BaseModel):
    """Request to record goal progress"""
    current_value: Optional[float] = Field(default=None, description="New current value")
    note: Optional[str] = Field(default=None, description="Optional note for the history entry")


class MilestoneRequest(BaseModel):
    """Request to add a milestone"""
    title: Optional[str] = None
    target_value: Optional[float] = None


class StatusUpdateRequest(BaseModel):
    """Request to pause, resume or abandon a goal"""
    status: Optional[str] = Field(default=None, description="active, paused or abandoned")


class GoalListResponse(BaseModel):
    """Filtered goals with per-status counts"""
    count: int
    stats: Dict[str, int]
    data: List[Goal]


class GoalProgressResponse(BaseModel):
    """Result of a progress update"""
    goal: Goal
    streak: Optional[StreakUpdate] = None
    new_badges: List[Achievement] = Field(default_factory=list)
    completed: bool = False


class ProgressHistoryResponse(BaseModel):
    goal_id: UUID
    title: str
    progress_history: List[ProgressEntry]
    current_progress: float


# ==========================================
# Streaks and achievements
# ==========================================

class StreakUpdateResponse(BaseModel):
    """Result of a streak check"""
    streak: StreakUpdate
    new_badges: List[Achievement]


class BadgeCheckResponse(BaseModel):
    """Result of an automatic badge check"""
    message: str
    new_badges: List[Achievement]
    count: int


class AchievementListResponse(BaseModel):
    count: int
    data: List[Achievement]


class AchievementStatsResponse(BaseModel):
    total: int
    by_type: Dict[str, int]
    by_tier: Dict[str, int]
    recent: List[Achievement]


# ==========================================
# Health metrics
# ==========================================

class HealthMetricRequest(BaseModel):
    """Request to record a health metric reading"""
    metric_type: str = Field(..., description="blood_pressure, heart_rate, weight, blood_sugar, ...")
    value: Dict[str, Any] = Field(..., description="Shape depends on metric_type")
    notes: Optional[str] = None
    measured_at: Optional[datetime] = Field(default=None, description="Defaults to now")


# ==========================================
# Misc
# ==========================================

class MessageResponse(BaseModel):
    message: str


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    database: str = Field(..., description="Database connection status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response model (FitnessTrackerError.to_dict())"""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    user_message: Optional[str] = Field(None, description="Message safe to show to the user")
    request_id: Optional[str] = None
    timestamp: Optional[datetime] = None
