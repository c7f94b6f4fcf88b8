"""模拟核心：数值截断、成长阶段、连续打卡、社交加成、冷却、月龄衰减与动作结算。

动作引擎与月龄结算依赖宠物档案模型，请直接从 virtual_pet.sim.actions / virtual_pet.sim.age 导入。
"""
from virtual_pet.sim.clamp import calculate_percentage, clamp, clamp_stat
from virtual_pet.sim.cooldown import calculate_effective_cooldown, calculate_remaining_cooldown
from virtual_pet.sim.errors import (
    EngineError,
    InsufficientCoins,
    InvalidAction,
    ItemNotOwned,
    OnCooldown,
    PetNotFound,
    StageLocked,
    WriteConflict,
)
from virtual_pet.sim.progression import check_evolution, progress_to_next_stage, stage_from_xp
from virtual_pet.sim.social import get_social_bonus
from virtual_pet.sim.streak import calculate_streak, check_streak_milestone, get_streak_bonus

__all__ = [
    "calculate_percentage",
    "clamp",
    "clamp_stat",
    "calculate_effective_cooldown",
    "calculate_remaining_cooldown",
    "EngineError",
    "InsufficientCoins",
    "InvalidAction",
    "ItemNotOwned",
    "OnCooldown",
    "PetNotFound",
    "StageLocked",
    "WriteConflict",
    "check_evolution",
    "progress_to_next_stage",
    "stage_from_xp",
    "get_social_bonus",
    "calculate_streak",
    "check_streak_milestone",
    "get_streak_bonus",
]
