"""Streak models"""
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, Field

from src.utils.datetime_helpers import now_utc


class CurrentStreak(BaseModel):
    count: int = 0
    start_date: Optional[date] = None
    last_activity_date: Optional[date] = None


class LongestStreak(BaseModel):
    count: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ActivityStreak(BaseModel):
    """Per-activity sub-streak (stored alongside the overall streak)"""
    current: int = 0
    longest: int = 0
    last_date: Optional[date] = None


class StreakMilestoneRecord(BaseModel):
    days: int
    achieved_date: date


class Streak(BaseModel):
    """One streak record per user"""
    user_id: str
    current_streak: CurrentStreak = Field(default_factory=CurrentStreak)
    longest_streak: LongestStreak = Field(default_factory=LongestStreak)
    total_active_days: int = 0
    exercise_streak: ActivityStreak = Field(default_factory=ActivityStreak)
    meal_logging_streak: ActivityStreak = Field(default_factory=ActivityStreak)
    goal_progress_streak: ActivityStreak = Field(default_factory=ActivityStreak)
    streak_milestones_achieved: list[StreakMilestoneRecord] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=now_utc)
    updated_at: datetime = Field(default_factory=now_utc)


class StreakUpdate(BaseModel):
    """Result of a continuity check"""
    streak_updated: bool
    current_streak: int
    longest_streak: int
    total_active_days: int
