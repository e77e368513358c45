"""Unit tests for Achievement System (src/gamification/achievement_system.py)"""
import pytest
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from src.exceptions import AuthorizationError, RecordNotFoundError
from src.gamification.achievement_system import (
    EARLY_BIRD_BADGE,
    FIRST_GOAL_BADGE,
    award_goal_completion_badge,
    award_if_absent,
    award_streak_badges,
    badge_catalogue,
    check_and_award_badges,
    delete_achievement,
    exercise_badge,
    get_achievement_stats,
    get_achievements,
    get_available_badges,
    get_tier_by_milestone,
    meal_badge,
    streak_badge,
)
from src.models.achievement import AchievementTier, BadgeType
from src.models.goal import GoalStatus


def log_past_exercises(store, user_id, count, now):
    """Log `count` exercises at noon on earlier days (never early-bird eligible)"""
    for i in range(count):
        store.log_exercise(user_id, (now - timedelta(days=i + 1)).replace(hour=12))


# ============================================================================
# Tier & Badge Definition Tests
# ============================================================================

class TestBadgeDefinitions:
    """Test badge definitions and tiering"""

    @pytest.mark.parametrize("milestone,tier", [
        (10, AchievementTier.BRONZE),
        (50, AchievementTier.SILVER),
        (100, AchievementTier.GOLD),
        (250, AchievementTier.PLATINUM),
        (500, AchievementTier.DIAMOND),
        (1000, AchievementTier.DIAMOND),
    ])
    def test_tier_by_milestone(self, milestone, tier):
        assert get_tier_by_milestone(milestone) == tier

    def test_streak_badges(self):
        week = streak_badge(7)
        assert week.badge_id == "streak_7"
        assert week.name == "Week Warrior"
        assert week.tier == AchievementTier.BRONZE

        year = streak_badge(365)
        assert year.tier == AchievementTier.DIAMOND

    def test_exercise_and_meal_badges(self):
        assert exercise_badge(50).tier == AchievementTier.SILVER
        assert exercise_badge(50).badge_id == "exercise_50"
        assert meal_badge(1000).badge_id == "meal_1000"
        assert meal_badge(1000).tier == AchievementTier.DIAMOND

    def test_catalogue_has_unique_ids(self):
        catalogue = badge_catalogue()
        ids = [b.badge_id for b in catalogue]
        assert len(ids) == len(set(ids)) == 20


# ============================================================================
# Awarding Tests
# ============================================================================

@pytest.mark.asyncio
async def test_award_if_absent_is_unique(fake_store, frozen_clock, test_user_id):
    """Awarding the same badge twice stores it once"""
    first = await award_if_absent(test_user_id, streak_badge(7))
    second = await award_if_absent(test_user_id, streak_badge(7))

    assert first is not None
    assert first.earned_at == frozen_clock.now
    assert second is None
    assert len(fake_store.achievements) == 1


@pytest.mark.asyncio
async def test_same_badge_for_different_users(fake_store, frozen_clock, test_user_id, other_user_id):
    assert await award_if_absent(test_user_id, streak_badge(7)) is not None
    assert await award_if_absent(other_user_id, streak_badge(7)) is not None
    assert len(fake_store.achievements) == 2


@pytest.mark.asyncio
async def test_award_streak_badges_skips_non_milestones(fake_store, frozen_clock, test_user_id):
    awarded = await award_streak_badges(test_user_id, [7, 8])

    assert [a.badge_id for a in awarded] == ["streak_7"]
    assert await award_streak_badges(test_user_id, [7]) == []


@pytest.mark.asyncio
async def test_goal_completion_badge(fake_store, frozen_clock, test_user_id, make_goal):
    goal = make_goal(current_value=100, status=GoalStatus.COMPLETED)

    badge = await award_goal_completion_badge(test_user_id, goal)

    assert badge.badge_id == f"goal_completed_{goal.id}"
    assert badge.badge_type == BadgeType.GOAL_COMPLETION
    assert badge.tier == AchievementTier.GOLD
    assert badge.related_goal_id == goal.id
    assert badge.related_data["title"] == goal.title

    # One badge per goal
    assert await award_goal_completion_badge(test_user_id, goal) is None


# ============================================================================
# Badge Check Tests
# ============================================================================

@pytest.mark.asyncio
async def test_fiftieth_exercise_awards_silver(fake_store, frozen_clock, test_user_id):
    log_past_exercises(fake_store, test_user_id, 50, frozen_clock.now)

    awarded = await check_and_award_badges(test_user_id)

    assert [a.badge_id for a in awarded] == ["exercise_50"]
    assert awarded[0].tier == AchievementTier.SILVER

    # The 51st log is not a milestone
    fake_store.log_exercise(test_user_id, frozen_clock.now.replace(hour=13) - timedelta(days=60))
    assert await check_and_award_badges(test_user_id) == []


@pytest.mark.asyncio
async def test_tenth_exercise_awards_bronze(fake_store, frozen_clock, test_user_id):
    log_past_exercises(fake_store, test_user_id, 10, frozen_clock.now)

    awarded = await check_and_award_badges(test_user_id)

    assert len(awarded) == 1
    assert awarded[0].tier == AchievementTier.BRONZE


@pytest.mark.asyncio
async def test_meal_milestone(fake_store, frozen_clock, test_user_id):
    fake_store.log_meals(test_user_id, 100)

    awarded = await check_and_award_badges(test_user_id)

    assert [a.badge_id for a in awarded] == ["meal_100"]
    assert awarded[0].tier == AchievementTier.GOLD


@pytest.mark.asyncio
async def test_no_badges_for_quiet_user(fake_store, frozen_clock, test_user_id):
    assert await check_and_award_badges(test_user_id) == []


class TestEarlyBird:
    """Seven exercises before 08:00 UTC on the current day"""

    @pytest.mark.asyncio
    async def test_awarded(self, fake_store, frozen_clock, test_user_id):
        morning = frozen_clock.now.replace(hour=6, minute=0)
        for i in range(7):
            fake_store.log_exercise(test_user_id, morning + timedelta(minutes=i))

        awarded = await check_and_award_badges(test_user_id)

        assert [a.badge_id for a in awarded] == [EARLY_BIRD_BADGE.badge_id]

    @pytest.mark.asyncio
    async def test_late_exercise_does_not_count(self, fake_store, frozen_clock, test_user_id):
        morning = frozen_clock.now.replace(hour=6, minute=0)
        for i in range(6):
            fake_store.log_exercise(test_user_id, morning + timedelta(minutes=i))
        fake_store.log_exercise(test_user_id, frozen_clock.now.replace(hour=8, minute=0))

        assert await check_and_award_badges(test_user_id) == []

    @pytest.mark.asyncio
    async def test_yesterday_does_not_count(self, fake_store, frozen_clock, test_user_id):
        yesterday = frozen_clock.now.replace(hour=6, minute=0) - timedelta(days=1)
        for i in range(7):
            fake_store.log_exercise(test_user_id, yesterday + timedelta(minutes=i))

        assert await check_and_award_badges(test_user_id) == []


class TestFirstGoal:

    @pytest.mark.asyncio
    async def test_first_completed_goal(self, fake_store, frozen_clock, test_user_id, make_goal):
        fake_store.add_goal(make_goal(current_value=100, status=GoalStatus.COMPLETED))

        awarded = await check_and_award_badges(test_user_id)

        assert [a.badge_id for a in awarded] == [FIRST_GOAL_BADGE.badge_id]

    @pytest.mark.asyncio
    async def test_not_awarded_twice(self, fake_store, frozen_clock, test_user_id, make_goal):
        fake_store.add_goal(make_goal(current_value=100, status=GoalStatus.COMPLETED))
        await check_and_award_badges(test_user_id)

        assert await check_and_award_badges(test_user_id) == []


class TestPerfectionist:
    """Three or more active goals, all at or above the time-linear expectation"""

    @pytest.mark.asyncio
    async def test_all_on_track(self, fake_store, frozen_clock, test_user_id, make_goal):
        for _ in range(3):
            fake_store.add_goal(make_goal(progress_percentage=50))

        awarded = await check_and_award_badges(test_user_id)

        assert [a.badge_id for a in awarded] == ["perfectionist"]
        assert awarded[0].criteria_value == 3

    @pytest.mark.asyncio
    async def test_one_goal_behind(self, fake_store, frozen_clock, test_user_id, make_goal):
        fake_store.add_goal(make_goal(progress_percentage=50))
        fake_store.add_goal(make_goal(progress_percentage=50))
        fake_store.add_goal(make_goal(progress_percentage=10))

        assert await check_and_award_badges(test_user_id) == []

    @pytest.mark.asyncio
    async def test_too_few_goals(self, fake_store, frozen_clock, test_user_id, make_goal):
        fake_store.add_goal(make_goal(progress_percentage=90))
        fake_store.add_goal(make_goal(progress_percentage=90))

        assert await check_and_award_badges(test_user_id) == []

    @pytest.mark.asyncio
    async def test_paused_goals_ignored(self, fake_store, frozen_clock, test_user_id, make_goal):
        for _ in range(3):
            fake_store.add_goal(make_goal(progress_percentage=50))
        fake_store.add_goal(make_goal(progress_percentage=0, status=GoalStatus.PAUSED))

        awarded = await check_and_award_badges(test_user_id)

        assert [a.badge_id for a in awarded] == ["perfectionist"]


# ============================================================================
# Reporting Tests
# ============================================================================

@pytest.mark.asyncio
async def test_achievement_stats(fake_store, frozen_clock, test_user_id):
    await award_if_absent(test_user_id, streak_badge(7))
    frozen_clock.advance(hours=1)
    await award_if_absent(test_user_id, streak_badge(14))
    frozen_clock.advance(hours=1)
    await award_if_absent(test_user_id, exercise_badge(50))

    stats = await get_achievement_stats(test_user_id)

    assert stats["total"] == 3
    assert stats["by_type"] == {"streak_milestone": 2, "exercise_milestone": 1}
    assert stats["by_tier"] == {
        "bronze": 1, "silver": 2, "gold": 0, "platinum": 0, "diamond": 0
    }
    assert [a.badge_id for a in stats["recent"]] == ["exercise_50", "streak_14", "streak_7"]


@pytest.mark.asyncio
async def test_stats_recent_limited_to_five(fake_store, frozen_clock, test_user_id):
    for days in [7, 14, 30, 60, 100, 180]:
        await award_if_absent(test_user_id, streak_badge(days))
        frozen_clock.advance(minutes=5)

    stats = await get_achievement_stats(test_user_id)

    assert stats["total"] == 6
    assert len(stats["recent"]) == 5
    assert stats["recent"][0].badge_id == "streak_180"


@pytest.mark.asyncio
async def test_get_achievements_filters(fake_store, frozen_clock, test_user_id):
    await award_if_absent(test_user_id, streak_badge(7))
    await award_if_absent(test_user_id, exercise_badge(50))

    streaks = await get_achievements(test_user_id, badge_type="streak_milestone")
    silver = await get_achievements(test_user_id, tier="silver")

    assert [a.badge_id for a in streaks] == ["streak_7"]
    assert [a.badge_id for a in silver] == ["exercise_50"]


@pytest.mark.asyncio
async def test_available_badges(fake_store, frozen_clock, test_user_id):
    await award_if_absent(test_user_id, streak_badge(7))

    result = await get_available_badges(test_user_id)

    assert result["total"] == 20
    assert result["earned"] == 1
    assert result["remaining"] == 19

    by_id = {b["badge_id"]: b for b in result["badges"]}
    assert by_id["streak_7"]["earned"] is True
    assert by_id["streak_14"]["earned"] is False
    assert by_id["streak_7"]["tier"] == "bronze"
    assert "related_goal_id" not in by_id["streak_7"]


@pytest.mark.asyncio
async def test_goal_badges_not_counted_as_catalogue(fake_store, frozen_clock, test_user_id, make_goal):
    await award_goal_completion_badge(test_user_id, make_goal())

    result = await get_available_badges(test_user_id)

    assert result["earned"] == 0


# ============================================================================
# Deletion Tests
# ============================================================================

class TestDeleteAchievement:

    @pytest.mark.asyncio
    async def test_owner_can_delete(self, fake_store, frozen_clock, test_user_id):
        badge = await award_if_absent(test_user_id, streak_badge(7))

        await delete_achievement(test_user_id, badge.id)

        assert fake_store.achievements == {}

    @pytest.mark.asyncio
    async def test_missing_achievement(self, fake_store, test_user_id):
        with pytest.raises(RecordNotFoundError):
            await delete_achievement(test_user_id, uuid4())

    @pytest.mark.asyncio
    async def test_other_users_achievement(self, fake_store, frozen_clock, test_user_id, other_user_id):
        badge = await award_if_absent(other_user_id, streak_badge(7))

        with pytest.raises(AuthorizationError):
            await delete_achievement(test_user_id, badge.id)

        assert badge.id in fake_store.achievements

    @pytest.mark.asyncio
    async def test_deleted_badge_can_be_earned_again(self, fake_store, frozen_clock, test_user_id):
        badge = await award_if_absent(test_user_id, streak_badge(7))
        await delete_achievement(test_user_id, badge.id)

        assert await award_if_absent(test_user_id, streak_badge(7)) is not None
