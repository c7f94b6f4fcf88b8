"""成长阶段：按经验值划分 幼年 / 少年 / 成年，并判断进化。

阶段边界固定：
- 幼年 Baby：0–199 XP
- 少年 Teen：200–599 XP
- 成年 Adult：600 XP 以上

经验值只增不减，所以阶段也只会前进，不会倒退。
"""
import math
from typing import Optional

from pydantic import BaseModel, Field

BABY = 1
TEEN = 2
ADULT = 3


class StageConfig(BaseModel):
    """单个阶段的配置。"""
    id: int = Field(..., description="阶段 ID")
    name: str = Field(..., description="阶段名")
    emoji: str = Field(..., description="展示用表情")
    min_xp: int = Field(..., description="阶段起点（含）")
    max_xp: Optional[int] = Field(None, description="阶段终点（含）；成年期无上限")


STAGES = {
    BABY: StageConfig(id=BABY, name="Baby", emoji="🍼", min_xp=0, max_xp=199),
    TEEN: StageConfig(id=TEEN, name="Teen", emoji="🧒", min_xp=200, max_xp=599),
    ADULT: StageConfig(id=ADULT, name="Adult", emoji="👨", min_xp=600, max_xp=None),
}


class EvolutionCheck(BaseModel):
    """进化判断结果。"""
    evolved: bool
    old_stage: int
    new_stage: int
    message: Optional[str] = None


class StageProgress(BaseModel):
    """距离下一阶段的进度。"""
    current_stage: int
    current_stage_name: str
    current_xp: int
    next_stage: Optional[int] = None
    next_stage_name: Optional[str] = None
    next_stage_xp: Optional[int] = None
    xp_needed: int = 0
    percentage: int = Field(..., ge=0, le=100)
    is_max_stage: bool = False
    message: str


def get_stage_config(stage_id: int) -> StageConfig:
    """按 ID 取阶段配置；未知 ID 视为幼年。"""
    return STAGES.get(stage_id, STAGES[BABY])


def stage_from_xp(xp: int) -> int:
    if xp >= STAGES[ADULT].min_xp:
        return ADULT
    if xp >= STAGES[TEEN].min_xp:
        return TEEN
    return BABY


def can_evolve(stage: int) -> bool:
    return stage < ADULT


def check_evolution(current_stage: int, new_xp: int) -> EvolutionCheck:
    """新经验值是否跨过了当前阶段的上界。"""
    new_stage = stage_from_xp(new_xp)
    evolved = new_stage > current_stage
    return EvolutionCheck(
        evolved=evolved,
        old_stage=current_stage,
        new_stage=max(new_stage, current_stage),
        message=f"🎉 Your pet evolved to {get_stage_config(new_stage).name}!" if evolved else None,
    )


def xp_for_next_stage(xp: int) -> Optional[int]:
    """下一阶段的起点经验值；已是成年期返回 None。"""
    stage = stage_from_xp(xp)
    if stage == ADULT:
        return None
    return STAGES[stage + 1].min_xp


def progress_percentage(xp: int) -> int:
    stage = stage_from_xp(xp)
    if stage == ADULT:
        return 100
    config = STAGES[stage]
    span = config.max_xp + 1 - config.min_xp
    # 四舍五入（.5 进位）
    return min(100, math.floor((xp - config.min_xp) / span * 100 + 0.5))


def progress_to_next_stage(xp: int) -> StageProgress:
    stage = stage_from_xp(xp)
    config = STAGES[stage]
    next_xp = xp_for_next_stage(xp)
    if next_xp is None:
        return StageProgress(
            current_stage=stage,
            current_stage_name=config.name,
            current_xp=xp,
            percentage=100,
            is_max_stage=True,
            message="Max stage reached!",
        )
    next_config = STAGES[stage + 1]
    xp_needed = next_xp - xp
    return StageProgress(
        current_stage=stage,
        current_stage_name=config.name,
        current_xp=xp,
        next_stage=next_config.id,
        next_stage_name=next_config.name,
        next_stage_xp=next_xp,
        xp_needed=xp_needed,
        percentage=progress_percentage(xp),
        message=f"{xp_needed} XP to {next_config.name}",
    )


def stage_label(stage_id: int) -> str:
    config = get_stage_config(stage_id)
    return f"{config.emoji} {config.name}"
