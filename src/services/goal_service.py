"""
GoalService - Goal Business Logic

Handles goal creation, progress updates, milestones, status changes and
the goals dashboard. A progress update can fan out into the streak tracker
and the achievement system.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from src.db import queries
from src.exceptions import AuthorizationError, RecordNotFoundError, ValidationError
from src.gamification import achievement_system, streak_system
from src.models.goal import Goal, GoalStatus, ProgressEntry, USER_SETTABLE_STATUSES
from src.utils import datetime_helpers
from src.utils.goal_progress import (
    apply_progress_rules,
    build_milestone,
    mark_achieved_milestones,
    progress_to_milestone,
)

logger = logging.getLogger(__name__)

# Fields a general edit may never touch
PROTECTED_FIELDS = {
    "id", "user_id", "progress_history", "status", "completed_date",
    "progress_percentage", "created_at", "updated_at",
}

NEAR_COMPLETION_PERCENTAGE = 80


def _validation_error(error: PydanticValidationError, user_id: str, operation: str) -> ValidationError:
    """Convert the first pydantic error into the API's ValidationError"""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    return ValidationError(
        first.get("msg", "Invalid goal data"),
        field=field,
        value=first.get("input") if isinstance(first.get("input"), (str, int, float, bool)) else None,
        user_id=user_id,
        operation=operation
    )


class GoalService:
    """
    Service for goal management.

    Responsibilities:
    - Goal CRUD with ownership checks
    - Progress updates (history, milestones, percentage, auto-completion)
    - Streak and badge side effects of progress
    - Listing, statistics and the dashboard
    """

    def __init__(self):
        logger.debug("GoalService initialized")

    async def _get_owned_goal(self, user_id: str, goal_id: UUID, operation: str) -> Goal:
        """Load a goal, 404 if missing, 403 if it belongs to someone else"""
        goal = await queries.get_goal(goal_id)

        if goal is None:
            raise RecordNotFoundError(
                "Goal not found",
                record_type="goal",
                record_id=str(goal_id),
                user_id=user_id,
                operation=operation
            )

        if goal.user_id != user_id:
            raise AuthorizationError(
                f"Not authorized to access goal {goal_id}",
                resource="goal",
                user_id=user_id,
                operation=operation
            )

        return goal

    # ==========================================
    # Mutations
    # ==========================================

    async def create_goal(self, user_id: str, data: Dict[str, Any]) -> Goal:
        """
        Create a goal for a user.

        Args:
            user_id: Owner
            data: Goal fields (goal_type, title, target_value, unit, target_date, ...)

        Returns:
            The stored goal, status active, progress already computed

        Raises:
            ValidationError: target date not in the future, or invalid fields
        """
        now = datetime_helpers.now_utc()
        target_date = data.get("target_date")

        if target_date is None or datetime_helpers.ensure_utc(target_date) <= now:
            raise ValidationError(
                "Target date must be in the future",
                field="target_date",
                value=str(target_date) if target_date else None,
                user_id=user_id,
                operation="create_goal"
            )

        fields = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
        if fields.get("start_value") is None:
            fields["start_value"] = fields.get("current_value") or 0

        try:
            goal = Goal(
                user_id=user_id,
                start_date=fields.pop("start_date", None) or now,
                created_at=now,
                updated_at=now,
                **fields
            )
        except PydanticValidationError as e:
            raise _validation_error(e, user_id, "create_goal") from e

        apply_progress_rules(goal, now)
        await queries.create_goal(goal)

        logger.info(f"User {user_id} created goal {goal.id} ({goal.goal_type.value})")
        return goal

    async def update_progress(
        self,
        user_id: str,
        goal_id: UUID,
        current_value: Optional[float],
        note: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Record a new progress value on a goal.

        Steps:
        1. Append a history entry and set current_value
        2. Mark newly reached milestones
        3. Recompute progress and auto-complete at 100%
        4. Persist the goal (one write)
        5. If still active: streak check and streak badges
        6. If completed by this update: goal completion badge

        Concurrent updates to the same goal are a lost-update hazard (see
        queries.update_goal).

        Returns:
            {
                'goal': Goal,
                'streak': StreakUpdate or None,
                'new_badges': [Achievement],
                'completed': bool
            }
        """
        goal = await self._get_owned_goal(user_id, goal_id, "update_progress")

        if current_value is None:
            raise ValidationError(
                "Please provide current value",
                field="current_value",
                user_id=user_id,
                operation="update_progress"
            )

        now = datetime_helpers.now_utc()
        goal.progress_history.append(ProgressEntry(value=current_value, recorded_at=now, note=note))
        goal.current_value = current_value

        reached = mark_achieved_milestones(goal, now)
        just_completed = apply_progress_rules(goal, now)
        goal.updated_at = now

        await queries.update_goal(goal)

        if reached:
            logger.info(f"Goal {goal.id}: {len(reached)} milestone(s) reached")

        streak_result = None
        new_badges = []

        if goal.status == GoalStatus.ACTIVE:
            streak_result = await streak_system.check_and_update_streak(user_id)
            milestones = streak_system.check_streak_milestones(streak_result.current_streak)
            if milestones:
                new_badges.extend(await achievement_system.award_streak_badges(user_id, milestones))

        if just_completed:
            badge = await achievement_system.award_goal_completion_badge(user_id, goal)
            if badge:
                new_badges.append(badge)

        return {
            "goal": goal,
            "streak": streak_result,
            "new_badges": new_badges,
            "completed": just_completed,
        }

    async def add_milestone(
        self,
        user_id: str,
        goal_id: UUID,
        title: Optional[str],
        target_value: Optional[float]
    ) -> Goal:
        """Add a milestone; it is achieved immediately if the goal is already past it"""
        goal = await self._get_owned_goal(user_id, goal_id, "add_milestone")

        if not title or not title.strip() or target_value is None:
            raise ValidationError(
                "Please provide title and target value",
                field="title" if not title or not title.strip() else "target_value",
                user_id=user_id,
                operation="add_milestone"
            )

        now = datetime_helpers.now_utc()
        goal.milestones.append(build_milestone(title.strip(), target_value, goal.current_value, now))
        goal.updated_at = now

        await queries.update_goal(goal)
        return goal

    async def update_status(self, user_id: str, goal_id: UUID, status: Optional[str]) -> Goal:
        """
        Pause, resume or abandon a goal.

        Completion is never set here; it only happens through progress.
        """
        goal = await self._get_owned_goal(user_id, goal_id, "update_status")

        allowed = {s.value for s in USER_SETTABLE_STATUSES}
        if status not in allowed:
            raise ValidationError(
                "Please provide valid status (active, paused, abandoned)",
                field="status",
                value=status,
                user_id=user_id,
                operation="update_status"
            )

        goal.status = GoalStatus(status)
        goal.updated_at = datetime_helpers.now_utc()

        await queries.update_goal(goal)
        logger.info(f"Goal {goal.id} status set to {status}")
        return goal

    async def update_goal(self, user_id: str, goal_id: UUID, changes: Dict[str, Any]) -> Goal:
        """
        General edit of a goal.

        Owner, history, status and completion date are silently left alone.
        Progress is recomputed afterwards, so moving the target can complete
        the goal.
        """
        goal = await self._get_owned_goal(user_id, goal_id, "update_goal")

        allowed_changes = {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}
        now = datetime_helpers.now_utc()

        try:
            updated = Goal.model_validate({**goal.model_dump(), **allowed_changes, "updated_at": now})
        except PydanticValidationError as e:
            raise _validation_error(e, user_id, "update_goal") from e

        just_completed = apply_progress_rules(updated, now)
        await queries.update_goal(updated)

        if just_completed:
            await achievement_system.award_goal_completion_badge(user_id, updated)

        return updated

    async def delete_goal(self, user_id: str, goal_id: UUID) -> None:
        """Hard delete a goal (owner only)"""
        await self._get_owned_goal(user_id, goal_id, "delete_goal")
        await queries.delete_goal(goal_id)
        logger.info(f"User {user_id} deleted goal {goal_id}")

    # ==========================================
    # Reads
    # ==========================================

    async def get_goal(self, user_id: str, goal_id: UUID) -> Goal:
        return await self._get_owned_goal(user_id, goal_id, "get_goal")

    async def list_goals(
        self,
        user_id: str,
        status: Optional[str] = None,
        goal_type: Optional[str] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Filtered goal list with per-status counts

        Returns:
            {'goals': [Goal], 'stats': {'total', 'active', 'completed', 'paused', 'abandoned'}}
        """
        goals = await queries.find_goals(
            user_id,
            status=status,
            goal_type=goal_type,
            category=category,
            priority=priority
        )

        stats = {"total": len(goals)}
        for goal_status in GoalStatus:
            stats[goal_status.value] = sum(1 for g in goals if g.status == goal_status)

        return {"goals": goals, "stats": stats}

    async def list_active_goals(self, user_id: str) -> List[Goal]:
        return await queries.find_goals(user_id, status=GoalStatus.ACTIVE.value)

    async def get_progress_history(self, user_id: str, goal_id: UUID) -> Dict[str, Any]:
        goal = await self._get_owned_goal(user_id, goal_id, "get_progress_history")
        return {
            "goal_id": goal.id,
            "title": goal.title,
            "progress_history": goal.progress_history,
            "current_progress": goal.progress_percentage,
        }

    async def get_dashboard(self, user_id: str) -> Dict[str, Any]:
        """
        Goals overview for a user

        Returns:
            {
                'stats': {...},
                'active_goals': top 5 active goals,
                'recently_completed': 3 most recently completed goals,
                'upcoming_milestones': first 5 unachieved milestones of active goals,
                'streak': {'current_streak', 'longest_streak', 'total_active_days'} or None
            }
        """
        goals = await queries.find_goals(user_id)
        now = datetime_helpers.now_utc()

        active = [g for g in goals if g.status == GoalStatus.ACTIVE]
        completed = [g for g in goals if g.status == GoalStatus.COMPLETED]

        stats = {
            "total_goals": len(goals),
            "active_goals": len(active),
            "completed_goals": len(completed),
            "paused_goals": sum(1 for g in goals if g.status == GoalStatus.PAUSED),
            "abandoned_goals": sum(1 for g in goals if g.status == GoalStatus.ABANDONED),
            "average_progress": (
                sum(g.progress_percentage for g in active) / len(active) if active else 0
            ),
            "goals_near_completion": sum(
                1 for g in active if g.progress_percentage >= NEAR_COMPLETION_PERCENTAGE
            ),
            "overdue_goals": sum(
                1 for g in active if datetime_helpers.ensure_utc(g.target_date) < now
            ),
        }

        upcoming_milestones = []
        for goal in active:
            for milestone in goal.milestones:
                if not milestone.achieved:
                    upcoming_milestones.append({
                        "goal_id": goal.id,
                        "goal_title": goal.title,
                        "milestone_title": milestone.title,
                        "target_value": milestone.target_value,
                        "current_value": goal.current_value,
                        "progress_to_milestone": progress_to_milestone(
                            goal.current_value, milestone.target_value
                        ),
                    })

        recently_completed = sorted(
            completed,
            key=lambda g: datetime_helpers.ensure_utc(g.completed_date or g.updated_at),
            reverse=True
        )[:3]

        streak = await queries.find_user_streak(user_id)

        return {
            "stats": stats,
            "active_goals": active[:5],
            "recently_completed": recently_completed,
            "upcoming_milestones": upcoming_milestones[:5],
            "streak": {
                "current_streak": streak.current_streak.count,
                "longest_streak": streak.longest_streak.count,
                "total_active_days": streak.total_active_days,
            } if streak else None,
        }
