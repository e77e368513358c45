"""
Goal progress rules

Pure functions that keep a goal's derived state consistent:
- progress percentage from start/target/current values
- auto-completion when progress reaches 100% on an active goal
- one-directional milestone achievement
- time-linear expected progress (used by the perfectionist badge)

Every goal mutation calls apply_progress_rules() explicitly before the goal
is persisted.
"""

import logging
from datetime import datetime
from typing import List

from src.models.goal import Goal, GoalStatus, Milestone
from src.utils.datetime_helpers import ensure_utc

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def calculate_progress_percentage(
    start_value: float,
    target_value: float,
    current_value: float,
    previous: float = 0
) -> float:
    """
    Normalized 0-100 progress of current_value between start and target

    Works for decreasing goals too (weight loss: start 90, target 80).
    When target == start there is no range to measure, so the previous
    percentage is returned unchanged.

    Examples:
        >>> calculate_progress_percentage(0, 100, 50)
        50.0
        >>> calculate_progress_percentage(90, 80, 85)
        50.0
        >>> calculate_progress_percentage(0, 10, 15)
        100.0
    """
    total_progress = target_value - start_value
    if total_progress == 0:
        return previous

    current_progress = current_value - start_value
    return min(100.0, max(0.0, (current_progress / total_progress) * 100))


def apply_progress_rules(goal: Goal, now: datetime) -> bool:
    """
    Recompute progress percentage and auto-complete the goal

    Args:
        goal: Goal to update in place
        now: Current time (completion timestamp)

    Returns:
        True if the goal transitioned to completed in this call
    """
    goal.progress_percentage = calculate_progress_percentage(
        goal.start_value,
        goal.target_value,
        goal.current_value,
        previous=goal.progress_percentage
    )

    if goal.progress_percentage >= 100 and goal.status == GoalStatus.ACTIVE:
        goal.status = GoalStatus.COMPLETED
        # A goal resumed after completion keeps its first completion date
        if goal.completed_date is None:
            goal.completed_date = now
        logger.info(f"Goal {goal.id} completed for user {goal.user_id}")
        return True

    return False


def mark_achieved_milestones(goal: Goal, now: datetime) -> List[Milestone]:
    """
    Mark every not-yet-achieved milestone at or below current_value

    Achievement is one-directional: a later drop in current_value never
    un-achieves a milestone.

    Returns:
        Milestones newly achieved in this call
    """
    newly_achieved = []
    for milestone in goal.milestones:
        if not milestone.achieved and goal.current_value >= milestone.target_value:
            milestone.achieved = True
            milestone.achieved_date = now
            newly_achieved.append(milestone)
    return newly_achieved


def build_milestone(title: str, target_value: float, current_value: float, now: datetime) -> Milestone:
    """New milestone, pre-achieved if the goal is already past it"""
    achieved = current_value >= target_value
    return Milestone(
        title=title,
        target_value=target_value,
        achieved=achieved,
        achieved_date=now if achieved else None
    )


def expected_progress(goal: Goal, now: datetime) -> float:
    """
    Where the goal should be if progress were linear over its time window

    expected = elapsed_days / total_days * 100. A goal whose target date is
    not after its start date is expected to be done (100).
    """
    start = ensure_utc(goal.start_date)
    target = ensure_utc(goal.target_date)
    total_days = (target - start).total_seconds() / SECONDS_PER_DAY
    if total_days <= 0:
        return 100.0

    elapsed_days = (ensure_utc(now) - start).total_seconds() / SECONDS_PER_DAY
    return (elapsed_days / total_days) * 100


def is_on_track(goal: Goal, now: datetime) -> bool:
    """True if the goal's progress is at or above its time-linear expectation"""
    return goal.progress_percentage >= expected_progress(goal, now)


def progress_to_milestone(current_value: float, milestone_target: float) -> float:
    """Percentage of the way from zero to a milestone's target, 2 decimals"""
    if milestone_target == 0:
        return 100.0 if current_value >= 0 else 0.0
    return round((current_value / milestone_target) * 100, 2)
