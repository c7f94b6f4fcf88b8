"""宠物约会：主人带自己的宠物和另一只宠物参加一项随机活动，两只宠物获得相同的效果。

- 活动从 6 种里随机抽取，随机源可注入；
- 效果与动作一样截断到 [0, 100]，经验值累加并检查进化；
- 冷却按发起人计算（跨所有宠物），6 小时一次；
- 约会不结算衰减与月龄，这些仍在下一次动作时补算。
"""
import random
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from virtual_pet.config import PLAYDATE_COOLDOWN_SECONDS
from virtual_pet.pet.models import Pet, Vitals
from virtual_pet.sim.actions import apply_stat_deltas
from virtual_pet.sim.cooldown import CooldownStatus, calculate_remaining_cooldown
from virtual_pet.sim.progression import check_evolution

PLAYDATE_ACTION = "playdate"


class PlayDateActivity(BaseModel):
    """一种约会活动。"""
    id: str
    name: str
    description: str
    emoji: str
    stats: Dict[str, int] = Field(default_factory=dict, description="两只宠物各自的状态增减")
    xp: int = Field(0, ge=0)


PLAYDATE_ACTIVITIES: Dict[str, PlayDateActivity] = {
    "parkVisit": PlayDateActivity(
        id="parkVisit", name="Park Visit", emoji="🌳",
        description="The pets had a wonderful time playing together at the park!",
        stats={"happiness": 15, "energy": 10}, xp=10,
    ),
    "restaurant": PlayDateActivity(
        id="restaurant", name="Restaurant", emoji="🍽️",
        description="The pets enjoyed a delicious meal together at a pet-friendly restaurant!",
        stats={"happiness": 10, "fullness": 15}, xp=10,
    ),
    "officeVisit": PlayDateActivity(
        id="officeVisit", name="Office Visit", emoji="🏢",
        description="The pets visited the office and met lots of people!",
        stats={"happiness": 5, "energy": -10}, xp=10,
    ),
    "spar": PlayDateActivity(
        id="spar", name="Spar", emoji="🥊",
        description="The pets had an energetic sparring session and learned new moves!",
        stats={"happiness": 20, "energy": -15}, xp=15,
    ),
    "grooming": PlayDateActivity(
        id="grooming", name="Grooming", emoji="✨",
        description="The pets got pampered together at a grooming spa!",
        stats={"happiness": 10, "cleanliness": 20}, xp=15,
    ),
    "racecarDriving": PlayDateActivity(
        id="racecarDriving", name="Racecar Driving", emoji="🏎️",
        description="The pets went racecar driving and had an adrenaline-pumping adventure!",
        stats={"happiness": 25, "energy": -10}, xp=50,
    ),
}


class PlayDateSide(BaseModel):
    """约会中一只宠物的变化。"""
    pet_id: str
    owner_id: str
    pet_name: str
    partner_name: str
    old_stats: Vitals
    old_xp: int
    vitals: Vitals
    xp: int
    stage: int
    evolved: bool = False
    messages: List[str] = Field(default_factory=list)

    def apply(self, pet: Pet, now: datetime) -> Pet:
        return pet.model_copy(update={
            **self.vitals.model_dump(),
            "xp": self.xp,
            "stage": self.stage,
            "updated_at": now,
        })


class PlayDateResult(BaseModel):
    activity: PlayDateActivity
    initiator_id: str
    performed_at: datetime
    pet: PlayDateSide
    partner: PlayDateSide


def all_activities() -> List[PlayDateActivity]:
    return list(PLAYDATE_ACTIVITIES.values())


def random_activity(rng: Optional[random.Random] = None) -> PlayDateActivity:
    return (rng or random.Random()).choice(all_activities())


def check_playdate_cooldown(
    last_playdate_at: Optional[datetime],
    now: datetime,
    base: int = PLAYDATE_COOLDOWN_SECONDS,
) -> CooldownStatus:
    """发起人距离下一次约会还剩多少秒；从未约会过的立即可用。"""
    return calculate_remaining_cooldown(last_playdate_at, now, base=base)


def resolve_side(pet: Pet, activity: PlayDateActivity, partner_name: str) -> PlayDateSide:
    """对 (快照, 活动) 的纯函数。"""
    vitals = apply_stat_deltas(pet.vitals, activity.stats)
    xp = pet.xp + activity.xp
    evolution = check_evolution(pet.stage, xp)
    messages = [f"{activity.emoji} {activity.name} with {partner_name}! {activity.description}"]
    if evolution.evolved:
        messages.append(evolution.message)
    return PlayDateSide(
        pet_id=pet.id,
        owner_id=pet.owner_id,
        pet_name=pet.name,
        partner_name=partner_name,
        old_stats=pet.vitals,
        old_xp=pet.xp,
        vitals=vitals,
        xp=xp,
        stage=evolution.new_stage,
        evolved=evolution.evolved,
        messages=messages,
    )
