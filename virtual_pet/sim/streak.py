"""连续打卡：按 UTC 日历日跟踪主人每日互动，并折算冷却减免。"""
from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

# 里程碑（天），升序
STREAK_MILESTONES = (3, 7, 14, 30, 60)

# (最少天数, 减免秒数, 档位)，从高到低匹配
STREAK_TIERS = (
    (60, 600, "legendary"),
    (30, 480, "epic"),
    (14, 360, "rare"),
    (7, 240, "uncommon"),
    (3, 120, "common"),
    (1, 0, "starting"),
)

STREAK_TIER_INFO = {
    "legendary": {"name": "Legendary", "emoji": "🏆", "description": "No cooldown!"},
    "epic": {"name": "Epic", "emoji": "💎", "description": "8 min cooldown reduction"},
    "rare": {"name": "Rare", "emoji": "⭐", "description": "6 min cooldown reduction"},
    "uncommon": {"name": "Uncommon", "emoji": "🌟", "description": "4 min cooldown reduction"},
    "common": {"name": "Common", "emoji": "🔥", "description": "2 min cooldown reduction"},
    "starting": {"name": "Starting", "emoji": "🔥", "description": "Keep going for bonuses!"},
    "none": {"name": "No Streak", "emoji": "⚪", "description": "No cooldown reduction"},
}


class StreakUpdate(BaseModel):
    """一次主人互动后的打卡状态。"""
    new_streak: int = Field(..., ge=0)
    is_new_day: bool
    streak_broken: bool
    message: Optional[str] = None


class Milestone(BaseModel):
    """下一个奖励档位。"""
    threshold: int = Field(..., description="达到该档位需要的数量（天数或人数）")
    bonus_seconds: int


class StreakBonus(BaseModel):
    reduction_seconds: int
    reduction_minutes: int
    tier: str
    next_milestone: Optional[Milestone] = None


class StreakMilestone(BaseModel):
    """首次跨过某个里程碑时的提示。"""
    days: int
    bonus_seconds: int
    tier: str
    message: str


def today_date_string(now: Optional[datetime] = None) -> str:
    """UTC 日期 YYYY-MM-DD。"""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%d")


def days_difference(first: str, second: str) -> int:
    """两个 YYYY-MM-DD 之间相差的整天数（取绝对值）。"""
    return abs((date.fromisoformat(second) - date.fromisoformat(first)).days)


def calculate_streak(last_interaction_date: Optional[str], current_streak: int, today: str) -> StreakUpdate:
    if not last_interaction_date:
        return StreakUpdate(
            new_streak=1,
            is_new_day=True,
            streak_broken=False,
            message="🔥 Streak started! Come back tomorrow to keep it going!",
        )
    delta = days_difference(last_interaction_date, today)
    if delta == 0:
        return StreakUpdate(new_streak=current_streak, is_new_day=False, streak_broken=False)
    if delta == 1:
        new_streak = current_streak + 1
        return StreakUpdate(
            new_streak=new_streak,
            is_new_day=True,
            streak_broken=False,
            message=f"🔥 {new_streak} day streak! Keep it up!",
        )
    return StreakUpdate(
        new_streak=1,
        is_new_day=True,
        streak_broken=True,
        message="💔 Streak broken! Starting fresh at day 1.",
    )


def get_streak_bonus(streak: int) -> StreakBonus:
    """按连续天数查冷却减免档位。"""
    reduction, tier = 0, "none"
    for min_days, seconds, name in STREAK_TIERS:
        if streak >= min_days:
            reduction, tier = seconds, name
            break
    next_milestone = None
    for min_days, seconds, _ in reversed(STREAK_TIERS):
        if seconds > reduction:
            next_milestone = Milestone(threshold=min_days, bonus_seconds=seconds)
            break
    return StreakBonus(
        reduction_seconds=reduction,
        reduction_minutes=reduction // 60,
        tier=tier,
        next_milestone=next_milestone,
    )


def streak_tier_info(tier: str) -> dict:
    return STREAK_TIER_INFO.get(tier, STREAK_TIER_INFO["none"])


def check_streak_milestone(old_streak: int, new_streak: int) -> Optional[StreakMilestone]:
    """升序扫描里程碑，返回本次新跨过的第一个；没有则 None。"""
    for milestone in STREAK_MILESTONES:
        if old_streak < milestone <= new_streak:
            bonus = get_streak_bonus(milestone)
            return StreakMilestone(
                days=milestone,
                bonus_seconds=bonus.reduction_seconds,
                tier=bonus.tier,
                message=(
                    f"🎉 {milestone}-day streak milestone! "
                    f"Cooldown reduced by {bonus.reduction_minutes} minutes!"
                ),
            )
    return None
