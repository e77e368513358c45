"""API routes for the fitness tracker

Every user-scoped route lives under /api/v1/users/{user_id}/ and requires an
API key bound to that user id. Domain errors (FitnessTrackerError) propagate
to the handler registered in server.py, which renders them with their HTTP
status.
"""
import logging
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Request, status

from src.api.models import (
    GoalCreateRequest, GoalUpdateRequest,
    ProgressUpdateRequest, MilestoneRequest, StatusUpdateRequest,
    GoalListResponse, GoalProgressResponse, ProgressHistoryResponse,
    StreakUpdateResponse, BadgeCheckResponse,
    AchievementListResponse, AchievementStatsResponse,
    HealthMetricRequest, MessageResponse, HealthCheckResponse
)
from src.api.auth import verify_user_access
from src.api.middleware import limiter
from src.config import DEFAULT_ANALYSIS_DAYS
from src.db.connection import db
from src.gamification import achievement_system, streak_system
from src.models.goal import Goal
from src.models.streak import Streak
from src.services.container import ServiceContainer, get_container
from src.utils import datetime_helpers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


# ==========================================
# Goals
# ==========================================

@router.post("/users/{user_id}/goals", response_model=Goal, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def create_goal_endpoint(
    request: Request,
    user_id: str,
    body: GoalCreateRequest,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    """Create a goal (Rate limit: 30/minute)"""
    return await services.goal_service.create_goal(user_id, body.model_dump(exclude_none=True))


@router.get("/users/{user_id}/goals", response_model=GoalListResponse)
@limiter.limit("60/minute")
async def list_goals_endpoint(
    request: Request,
    user_id: str,
    goal_status: Optional[str] = Query(default=None, alias="status"),
    goal_type: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[str] = None,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    """List goals with optional filters, high priority and soonest deadline first"""
    result = await services.goal_service.list_goals(
        user_id,
        status=goal_status,
        goal_type=goal_type,
        category=category,
        priority=priority
    )
    return GoalListResponse(count=len(result["goals"]), stats=result["stats"], data=result["goals"])


@router.get("/users/{user_id}/goals/active", response_model=GoalListResponse)
@limiter.limit("60/minute")
async def list_active_goals_endpoint(
    request: Request,
    user_id: str,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    """Active goals only"""
    goals = await services.goal_service.list_active_goals(user_id)
    return GoalListResponse(count=len(goals), stats={"active": len(goals)}, data=goals)


@router.get("/users/{user_id}/goals/dashboard")
@limiter.limit("60/minute")
async def goals_dashboard_endpoint(
    request: Request,
    user_id: str,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    """Goals dashboard: stats, top goals, upcoming milestones, streak"""
    return await services.goal_service.get_dashboard(user_id)


@router.get("/users/{user_id}/goals/{goal_id}", response_model=Goal)
@limiter.limit("60/minute")
async def get_goal_endpoint(
    request: Request,
    user_id: str,
    goal_id: UUID,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    return await services.goal_service.get_goal(user_id, goal_id)


@router.put("/users/{user_id}/goals/{goal_id}", response_model=Goal)
@limiter.limit("30/minute")
async def update_goal_endpoint(
    request: Request,
    user_id: str,
    goal_id: UUID,
    body: GoalUpdateRequest,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    """General goal edit (owner, history, status and completion date are not editable)"""
    return await services.goal_service.update_goal(user_id, goal_id, body.model_dump(exclude_unset=True))


@router.delete("/users/{user_id}/goals/{goal_id}", response_model=MessageResponse)
@limiter.limit("30/minute")
async def delete_goal_endpoint(
    request: Request,
    user_id: str,
    goal_id: UUID,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    await services.goal_service.delete_goal(user_id, goal_id)
    return MessageResponse(message="Goal deleted successfully")


@router.put("/users/{user_id}/goals/{goal_id}/progress", response_model=GoalProgressResponse)
@limiter.limit("60/minute")
async def update_progress_endpoint(
    request: Request,
    user_id: str,
    goal_id: UUID,
    body: ProgressUpdateRequest,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    """
    Record goal progress

    Also advances the activity streak (active goals) and returns any badges
    earned by this update.
    """
    result = await services.goal_service.update_progress(user_id, goal_id, body.current_value, body.note)
    return GoalProgressResponse(**result)


@router.post("/users/{user_id}/goals/{goal_id}/milestones", response_model=Goal)
@limiter.limit("30/minute")
async def add_milestone_endpoint(
    request: Request,
    user_id: str,
    goal_id: UUID,
    body: MilestoneRequest,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    return await services.goal_service.add_milestone(user_id, goal_id, body.title, body.target_value)


@router.put("/users/{user_id}/goals/{goal_id}/status", response_model=Goal)
@limiter.limit("30/minute")
async def update_status_endpoint(
    request: Request,
    user_id: str,
    goal_id: UUID,
    body: StatusUpdateRequest,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    """Pause, resume or abandon a goal"""
    return await services.goal_service.update_status(user_id, goal_id, body.status)


@router.get("/users/{user_id}/goals/{goal_id}/history", response_model=ProgressHistoryResponse)
@limiter.limit("60/minute")
async def progress_history_endpoint(
    request: Request,
    user_id: str,
    goal_id: UUID,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    return await services.goal_service.get_progress_history(user_id, goal_id)


# ==========================================
# Achievements and streaks
# ==========================================

@router.get("/users/{user_id}/achievements", response_model=AchievementListResponse)
@limiter.limit("60/minute")
async def list_achievements_endpoint(
    request: Request,
    user_id: str,
    badge_type: Optional[str] = None,
    tier: Optional[str] = None,
    current_user: str = Depends(verify_user_access)
):
    """User's badges, newest first"""
    achievements = await achievement_system.get_achievements(user_id, badge_type=badge_type, tier=tier)
    return AchievementListResponse(count=len(achievements), data=achievements)


@router.get("/users/{user_id}/achievements/stats", response_model=AchievementStatsResponse)
@limiter.limit("60/minute")
async def achievement_stats_endpoint(
    request: Request,
    user_id: str,
    current_user: str = Depends(verify_user_access)
):
    return await achievement_system.get_achievement_stats(user_id)


@router.get("/users/{user_id}/achievements/available")
@limiter.limit("60/minute")
async def available_badges_endpoint(
    request: Request,
    user_id: str,
    current_user: str = Depends(verify_user_access)
):
    """Badge catalogue with earned flags"""
    return await achievement_system.get_available_badges(user_id)


@router.post("/users/{user_id}/achievements/check", response_model=BadgeCheckResponse)
@limiter.limit("20/minute")
async def check_badges_endpoint(
    request: Request,
    user_id: str,
    current_user: str = Depends(verify_user_access)
):
    """Evaluate count-based and special badge rules (Rate limit: 20/minute)"""
    new_badges = await achievement_system.check_and_award_badges(user_id)
    return BadgeCheckResponse(
        message="New badges awarded!" if new_badges else "No new badges",
        new_badges=new_badges,
        count=len(new_badges)
    )


@router.delete("/users/{user_id}/achievements/{achievement_id}", response_model=MessageResponse)
@limiter.limit("20/minute")
async def delete_achievement_endpoint(
    request: Request,
    user_id: str,
    achievement_id: UUID,
    current_user: str = Depends(verify_user_access)
):
    await achievement_system.delete_achievement(user_id, achievement_id)
    return MessageResponse(message="Achievement deleted successfully")


@router.get("/users/{user_id}/streak", response_model=Streak)
@limiter.limit("60/minute")
async def get_streak_endpoint(
    request: Request,
    user_id: str,
    current_user: str = Depends(verify_user_access)
):
    return await streak_system.get_streak(user_id)


@router.post("/users/{user_id}/streak/update", response_model=StreakUpdateResponse)
@limiter.limit("30/minute")
async def update_streak_endpoint(
    request: Request,
    user_id: str,
    current_user: str = Depends(verify_user_access)
):
    """Record today's activity and award any streak milestone badge"""
    result = await streak_system.check_and_update_streak(user_id)
    milestones = streak_system.check_streak_milestones(result.current_streak)
    new_badges = await achievement_system.award_streak_badges(user_id, milestones) if milestones else []
    return StreakUpdateResponse(streak=result, new_badges=new_badges)


# ==========================================
# Health metrics and analysis
# ==========================================

@router.post("/users/{user_id}/health-metrics", status_code=status.HTTP_201_CREATED)
@limiter.limit("60/minute")
async def record_metric_endpoint(
    request: Request,
    user_id: str,
    body: HealthMetricRequest,
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    """Store a health metric reading (value shape depends on metric_type)"""
    metric = await services.health_analysis_service.record_metric(user_id, body.model_dump(exclude_none=True))
    return metric.model_dump(mode="json")


@router.get("/users/{user_id}/health-analysis")
@limiter.limit("30/minute")
async def health_analysis_endpoint(
    request: Request,
    user_id: str,
    days: int = Query(default=DEFAULT_ANALYSIS_DAYS, ge=1),
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    """Interpretation of the latest reading per metric type with an overall status"""
    return await services.health_analysis_service.get_health_analysis(user_id, days=days)


@router.get("/users/{user_id}/health-analysis/blood-pressure")
@limiter.limit("30/minute")
async def blood_pressure_analysis_endpoint(
    request: Request,
    user_id: str,
    days: int = Query(default=DEFAULT_ANALYSIS_DAYS, ge=1),
    include_history: bool = Query(default=False, alias="includeHistory"),
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    return await services.health_analysis_service.get_blood_pressure_analysis(
        user_id, days=days, include_history=include_history
    )


@router.get("/users/{user_id}/health-analysis/diabetes-risk")
@limiter.limit("30/minute")
async def diabetes_risk_endpoint(
    request: Request,
    user_id: str,
    days: int = Query(default=DEFAULT_ANALYSIS_DAYS, ge=1),
    include_history: bool = Query(default=False, alias="includeHistory"),
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    return await services.health_analysis_service.get_diabetes_risk(
        user_id, days=days, include_history=include_history
    )


@router.get("/users/{user_id}/health-analysis/bmi")
@limiter.limit("30/minute")
async def bmi_analysis_endpoint(
    request: Request,
    user_id: str,
    days: int = Query(default=DEFAULT_ANALYSIS_DAYS, ge=1),
    include_history: bool = Query(default=False, alias="includeHistory"),
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    return await services.health_analysis_service.get_bmi_analysis(
        user_id, days=days, include_history=include_history
    )


@router.get("/users/{user_id}/health-analysis/heart-rate")
@limiter.limit("30/minute")
async def heart_rate_analysis_endpoint(
    request: Request,
    user_id: str,
    days: int = Query(default=DEFAULT_ANALYSIS_DAYS, ge=1),
    include_history: bool = Query(default=False, alias="includeHistory"),
    current_user: str = Depends(verify_user_access),
    services: ServiceContainer = Depends(get_container)
):
    return await services.health_analysis_service.get_heart_rate_analysis(
        user_id, days=days, include_history=include_history
    )


# ==========================================
# Service health
# ==========================================

@router.get("/health", response_model=HealthCheckResponse)
@limiter.limit("60/minute")
async def health_check(request: Request):
    """Health check endpoint (no API key; Rate limit: 60/minute for monitoring systems)"""
    db_ok = await db.ping()

    return HealthCheckResponse(
        status="healthy" if db_ok else "degraded",
        database="connected" if db_ok else "disconnected",
        timestamp=datetime_helpers.now_utc()
    )
