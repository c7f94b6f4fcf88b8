"""冷却计算：基础冷却减去打卡与社交两项减免。

主人与访客是两套互不相干的冷却范围：
- 主人：以宠物自身的 last_action_at 为准（按 pet_id）
- 访客：以该访客在这只宠物上的最近一条互动记录为准（按 pet_id + actor_id）
"""
import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from virtual_pet.config import BASE_COOLDOWN_SECONDS
from virtual_pet.sim.social import get_social_bonus
from virtual_pet.sim.streak import get_streak_bonus


class BonusPart(BaseModel):
    seconds: int
    minutes: int
    tier: str


class CooldownInfo(BaseModel):
    """有效冷却及其构成。"""
    base_cooldown: int
    streak_bonus: BonusPart
    social_bonus: BonusPart
    total_reduction: int
    effective_cooldown: int = Field(..., ge=0)
    effective_cooldown_minutes: int
    has_no_cooldown: bool


class CooldownStatus(BaseModel):
    is_on_cooldown: bool
    remaining_seconds: int = Field(..., ge=0, description="剩余秒数，向上取整")
    info: CooldownInfo


def calculate_effective_cooldown(
    streak: int = 0,
    unique_interactors: int = 0,
    base: int = BASE_COOLDOWN_SECONDS,
) -> CooldownInfo:
    streak_bonus = get_streak_bonus(streak)
    social_bonus = get_social_bonus(unique_interactors)
    total = streak_bonus.reduction_seconds + social_bonus.reduction_seconds
    effective = max(0, base - total)
    return CooldownInfo(
        base_cooldown=base,
        streak_bonus=BonusPart(
            seconds=streak_bonus.reduction_seconds,
            minutes=streak_bonus.reduction_minutes,
            tier=streak_bonus.tier,
        ),
        social_bonus=BonusPart(
            seconds=social_bonus.reduction_seconds,
            minutes=social_bonus.reduction_minutes,
            tier=social_bonus.tier,
        ),
        total_reduction=total,
        effective_cooldown=effective,
        effective_cooldown_minutes=effective // 60,
        has_no_cooldown=effective == 0,
    )


def calculate_remaining_cooldown(
    last_action_at: Optional[datetime],
    now: datetime,
    streak: int = 0,
    unique_interactors: int = 0,
    base: int = BASE_COOLDOWN_SECONDS,
) -> CooldownStatus:
    """距离下次可互动还剩多少秒；从未互动过的一律立即可用。"""
    info = calculate_effective_cooldown(streak, unique_interactors, base)
    if last_action_at is None:
        return CooldownStatus(is_on_cooldown=False, remaining_seconds=0, info=info)
    elapsed = (now - last_action_at).total_seconds()
    remaining = max(0.0, info.effective_cooldown - elapsed)
    return CooldownStatus(
        is_on_cooldown=remaining > 0,
        remaining_seconds=math.ceil(remaining),
        info=info,
    )


def format_cooldown_time(seconds: int) -> str:
    if seconds <= 0:
        return "Ready!"
    minutes, rest = divmod(seconds, 60)
    if minutes == 0:
        return f"{rest}s"
    if rest == 0:
        return f"{minutes}m"
    return f"{minutes}m {rest}s"


def cooldown_breakdown(info: CooldownInfo) -> Optional[str]:
    """减免说明；没有任何减免时返回 None。"""
    if info.has_no_cooldown:
        return "🎉 No cooldown!"
    if info.streak_bonus.seconds == 0 and info.social_bonus.seconds == 0:
        return None
    parts = []
    if info.streak_bonus.seconds > 0:
        parts.append(f"🔥 -{info.streak_bonus.minutes}m")
    if info.social_bonus.seconds > 0:
        parts.append(f"👥 -{info.social_bonus.minutes}m")
    total = info.streak_bonus.minutes + info.social_bonus.minutes
    return f"Reduced by {total}m ({', '.join(parts)})"
