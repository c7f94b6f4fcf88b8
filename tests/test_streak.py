"""连续打卡与社交加成测试。"""
from datetime import datetime, timedelta, timezone

import pytest

from virtual_pet.sim.social import format_social_bonus_message, get_social_bonus, social_tier_info
from virtual_pet.sim.streak import (
    calculate_streak,
    check_streak_milestone,
    days_difference,
    get_streak_bonus,
    streak_tier_info,
    today_date_string,
)


def test_first_interaction_starts_streak() -> None:
    update = calculate_streak(None, 0, "2024-01-01")
    assert update.new_streak == 1
    assert update.is_new_day is True
    assert update.streak_broken is False
    assert update.message == "🔥 Streak started! Come back tomorrow to keep it going!"


def test_consecutive_day_extends_streak() -> None:
    update = calculate_streak("2024-01-01", 5, "2024-01-02")
    assert update.new_streak == 6
    assert update.is_new_day is True
    assert update.message == "🔥 6 day streak! Keep it up!"


def test_same_day_keeps_streak() -> None:
    update = calculate_streak("2024-01-01", 5, "2024-01-01")
    assert update.new_streak == 5
    assert update.is_new_day is False
    assert update.message is None


def test_gap_breaks_streak() -> None:
    update = calculate_streak("2024-01-01", 5, "2024-01-05")
    assert update.new_streak == 1
    assert update.streak_broken is True
    assert update.message == "💔 Streak broken! Starting fresh at day 1."


def test_today_is_utc_date() -> None:
    tz = timezone(timedelta(hours=8))
    assert today_date_string(datetime(2024, 1, 2, 3, 0, tzinfo=tz)) == "2024-01-01"
    assert days_difference("2024-01-03", "2024-01-01") == 2


@pytest.mark.parametrize(
    "streak,seconds,tier",
    [(0, 0, "none"), (1, 0, "starting"), (3, 120, "common"), (7, 240, "uncommon"),
     (14, 360, "rare"), (30, 480, "epic"), (60, 600, "legendary")],
)
def test_streak_bonus_tiers(streak: int, seconds: int, tier: str) -> None:
    bonus = get_streak_bonus(streak)
    assert bonus.reduction_seconds == seconds
    assert bonus.tier == tier


def test_streak_bonus_next_milestone() -> None:
    assert get_streak_bonus(4).next_milestone.threshold == 7
    assert get_streak_bonus(60).next_milestone is None


def test_streak_milestone() -> None:
    milestone = check_streak_milestone(2, 3)
    assert milestone is not None
    assert milestone.days == 3
    assert milestone.message == "🎉 3-day streak milestone! Cooldown reduced by 2 minutes!"
    assert check_streak_milestone(3, 4) is None
    assert check_streak_milestone(5, 5) is None


@pytest.mark.parametrize(
    "unique,seconds,tier",
    [(0, 0, "none"), (4, 0, "none"), (5, 60, "shared"), (10, 120, "friendly"),
     (20, 180, "social"), (50, 240, "popular"), (100, 300, "viral")],
)
def test_social_bonus_tiers(unique: int, seconds: int, tier: str) -> None:
    bonus = get_social_bonus(unique)
    assert bonus.reduction_seconds == seconds
    assert bonus.tier == tier


def test_social_bonus_message() -> None:
    assert format_social_bonus_message(0) == "Share your pet to unlock social bonuses!"
    assert format_social_bonus_message(7) == "7 friends! 3 more for next bonus."
    assert format_social_bonus_message(120) == "120 friends! Maximum social bonus unlocked!"


def test_tier_info_falls_back_to_none() -> None:
    assert streak_tier_info("legendary")["name"] == "Legendary"
    assert streak_tier_info("bogus")["name"] == "No Streak"
    assert social_tier_info("viral")["emoji"] == "🌟"
    assert social_tier_info("bogus")["name"] == "Private"
