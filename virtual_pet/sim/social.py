"""社交加成：按互动过的独立访客数折算冷却减免。"""
from typing import Optional

from pydantic import BaseModel

from virtual_pet.sim.streak import Milestone

# (最少人数, 减免秒数, 档位)，从高到低匹配
SOCIAL_TIERS = (
    (100, 300, "viral"),
    (50, 240, "popular"),
    (20, 180, "social"),
    (10, 120, "friendly"),
    (5, 60, "shared"),
)

SOCIAL_TIER_INFO = {
    "viral": {"name": "Viral", "emoji": "🌟", "description": "100+ friends!"},
    "popular": {"name": "Popular", "emoji": "✨", "description": "50+ friends"},
    "social": {"name": "Social", "emoji": "🎉", "description": "20+ friends"},
    "friendly": {"name": "Friendly", "emoji": "👥", "description": "10+ friends"},
    "shared": {"name": "Shared", "emoji": "🤝", "description": "5+ friends"},
    "none": {"name": "Private", "emoji": "🔒", "description": "Not shared yet"},
}


class SocialBonus(BaseModel):
    reduction_seconds: int
    reduction_minutes: int
    tier: str
    next_milestone: Optional[Milestone] = None


def get_social_bonus(unique_interactors: int) -> SocialBonus:
    reduction, tier = 0, "none"
    next_milestone = None
    for min_count, seconds, name in SOCIAL_TIERS:
        if unique_interactors >= min_count:
            reduction, tier = seconds, name
            break
        next_milestone = Milestone(threshold=min_count, bonus_seconds=seconds)
    return SocialBonus(
        reduction_seconds=reduction,
        reduction_minutes=reduction // 60,
        tier=tier,
        next_milestone=next_milestone,
    )


def social_tier_info(tier: str) -> dict:
    return SOCIAL_TIER_INFO.get(tier, SOCIAL_TIER_INFO["none"])


def format_social_bonus_message(unique_interactors: int) -> str:
    if unique_interactors == 0:
        return "Share your pet to unlock social bonuses!"
    bonus = get_social_bonus(unique_interactors)
    if bonus.next_milestone:
        remaining = bonus.next_milestone.threshold - unique_interactors
        return f"{unique_interactors} friends! {remaining} more for next bonus."
    return f"{unique_interactors} friends! Maximum social bonus unlocked!"
