"""动作引擎：校验动作、检查冷却、结算属性变化，并给出一次完整的状态变更。

流程：空闲 → 冷却检查 → 结算 → （由调用方）提交 / 通知。
引擎本身不写任何存储，只读取快照；提交、追加互动记录、发送通知都在 service 层完成。
"""
import random
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from virtual_pet.config import BASE_COOLDOWN_SECONDS, WORK_COIN_RANGE, WORK_MIN_STAGE
from virtual_pet.interactions.log import InteractionLog
from virtual_pet.pet.models import VITAL_NAMES, ActorChannel, Pet, Vitals
from virtual_pet.pet.permission import PermissionChecker, get_channel_for_actor
from virtual_pet.pet.store import PetStore
from virtual_pet.sim.age import AgeEvaluation, evaluate_pet_age
from virtual_pet.sim.clamp import clamp_stat
from virtual_pet.sim.cooldown import CooldownStatus, calculate_remaining_cooldown
from virtual_pet.sim.errors import InvalidAction, OnCooldown, PetNotFound
from virtual_pet.sim.progression import check_evolution, get_stage_config
from virtual_pet.sim.streak import (
    StreakMilestone,
    StreakUpdate,
    calculate_streak,
    check_streak_milestone,
    today_date_string,
)


class ActionEffect(BaseModel):
    """一个动作对状态的影响。"""
    name: str
    description: str
    stats: Dict[str, int] = Field(default_factory=dict, description="四项状态的增减")
    xp: int = Field(0, ge=0)
    coins: Optional[Tuple[int, int]] = Field(None, description="随机金币区间（含两端）")
    min_stage: int = 1


OWNER_ACTIONS: Dict[str, ActionEffect] = {
    "feed": ActionEffect(name="Feed", description="Give your pet food to increase fullness",
                         stats={"fullness": 20}, xp=5),
    "play": ActionEffect(name="Play", description="Play with your pet to increase happiness",
                         stats={"happiness": 20, "energy": -10}, xp=10),
    "clean": ActionEffect(name="Clean", description="Clean your pet to increase cleanliness",
                          stats={"cleanliness": 25}, xp=5),
    "rest": ActionEffect(name="Rest", description="Let your pet rest to restore energy",
                         stats={"energy": 30}, xp=5),
    "exercise": ActionEffect(name="Exercise", description="Exercise your pet for fitness and happiness",
                             stats={"energy": -15, "happiness": 10, "fullness": -10}, xp=15),
    "treat": ActionEffect(name="Treat", description="Give your pet a treat for happiness and fullness",
                          stats={"fullness": 10, "happiness": 15}, xp=5),
    "work": ActionEffect(name="Work", description="Send your pet to work for coins",
                         stats={"energy": -20}, xp=10, coins=WORK_COIN_RANGE, min_stage=WORK_MIN_STAGE),
}

VISITOR_ACTIONS: Dict[str, ActionEffect] = {
    "pet": ActionEffect(name="Pet", description="Give the pet some love and attention",
                        stats={"happiness": 15}, xp=5),
    "treat": ActionEffect(name="Treat", description="Give the pet a tasty treat",
                          stats={"happiness": 15, "fullness": 10}, xp=5),
}

ACTION_TABLES = {
    ActorChannel.OWNER: OWNER_ACTIONS,
    ActorChannel.VISITOR: VISITOR_ACTIONS,
}


class ActionResult(BaseModel):
    """一次动作结算后的完整结果，由调用方原子地写回。"""
    pet_id: str
    owner_id: str
    action_type: str
    channel: ActorChannel
    actor_id: str
    performed_at: datetime
    expected_version: int = Field(..., description="结算所基于的快照版本")

    effects: ActionEffect
    old_stats: Vitals
    old_xp: int
    vitals: Vitals
    xp: int
    stage: int
    evolved: bool = False
    age_in_months: int
    aged: bool = False
    decayed: bool = False
    age: AgeEvaluation

    streak: Optional[StreakUpdate] = None
    streak_milestone: Optional[StreakMilestone] = None
    coins_earned: int = 0
    cooldown: CooldownStatus
    notifications: List[str] = Field(default_factory=list)

    model_config = ConfigDict(use_enum_values=True)

    def apply(self, pet: Pet) -> Pet:
        """把结果合并到快照上，得到待提交的新档案。"""
        update = {
            **self.vitals.model_dump(),
            "xp": self.xp,
            "stage": self.stage,
            "age_in_months": self.age_in_months,
            "coins": pet.coins + self.coins_earned,
            "updated_at": self.performed_at,
        }
        if self.age.should_update:
            update["last_age_check"] = self.age.next_age_check
        if self.channel == ActorChannel.OWNER:
            update["last_action_at"] = self.performed_at
        elif self.channel == ActorChannel.VISITOR:
            update["visitor_last_action_at"] = self._visitor_times(pet)
        if self.streak is not None:
            update["current_streak"] = self.streak.new_streak
            update["longest_streak"] = max(pet.longest_streak, self.streak.new_streak)
            update["last_interaction_date"] = today_date_string(self.performed_at)
        return pet.model_copy(update=update)

    def _visitor_times(self, pet: Pet) -> Dict[str, datetime]:
        # 冷却已过的访客不必再保留
        window = self.cooldown.info.base_cooldown
        times = {
            actor: at
            for actor, at in pet.visitor_last_action_at.items()
            if (self.performed_at - at).total_seconds() < window
        }
        times[self.actor_id] = self.performed_at
        return times


def get_action(action_type: str, channel: ActorChannel) -> ActionEffect:
    effect = ACTION_TABLES[ActorChannel(channel)].get(action_type)
    if effect is None:
        raise InvalidAction(action_type)
    return effect


def apply_stat_deltas(vitals: Vitals, deltas: Dict[str, int]) -> Vitals:
    return Vitals(**{name: clamp_stat(getattr(vitals, name) + deltas.get(name, 0)) for name in VITAL_NAMES})


def check_cooldown(
    pet: Pet,
    channel: ActorChannel,
    now: datetime,
    unique_interactors: int = 0,
    visitor_last_at: Optional[datetime] = None,
    base: int = BASE_COOLDOWN_SECONDS,
    actor_id: Optional[str] = None,
) -> CooldownStatus:
    """主人按宠物自身的 last_action_at 计算（含打卡与社交减免）；访客按自己的最近一次互动计算。

    访客的最近一次互动取互动记录与快照上 visitor_last_action_at 中较晚的一个；
    后者随快照条件写入，并发提交的输家重试时一定能看到赢家的时间。
    """
    if ActorChannel(channel) == ActorChannel.OWNER:
        social = unique_interactors if pet.sharing_enabled else 0
        return calculate_remaining_cooldown(pet.last_action_at, now, pet.current_streak, social, base)
    seen = [visitor_last_at, pet.visitor_last_action_at.get(actor_id) if actor_id else None]
    last_at = max((t for t in seen if t is not None), default=None)
    return calculate_remaining_cooldown(last_at, now, base=base)


def resolve_action(
    pet: Pet,
    action_type: str,
    actor_id: str,
    now: datetime,
    channel: ActorChannel = ActorChannel.OWNER,
    unique_interactors: int = 0,
    visitor_last_at: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    base_cooldown: int = BASE_COOLDOWN_SECONDS,
) -> ActionResult:
    """对 (快照, 互动统计, now) 的纯函数。冷却检查先于任何计算。"""
    channel = ActorChannel(channel)
    effect = get_action(action_type, channel)
    if pet.stage < effect.min_stage:
        raise InvalidAction(
            action_type,
            f"{effect.name} unlocks at {get_stage_config(effect.min_stage).name} stage",
        )

    cooldown = check_cooldown(pet, channel, now, unique_interactors, visitor_last_at, base_cooldown, actor_id)
    if cooldown.is_on_cooldown:
        raise OnCooldown(cooldown.remaining_seconds)

    old_stats = pet.vitals
    vitals = apply_stat_deltas(old_stats, effect.stats)
    xp = pet.xp + effect.xp
    coins_earned = 0
    if effect.coins:
        coins_earned = (rng or random.Random()).randint(*effect.coins)

    # 衰减在动作之后结算
    age = evaluate_pet_age(pet, now, vitals)
    if age.should_update:
        vitals = age.new_stats

    evolution = check_evolution(pet.stage, xp)

    streak = None
    milestone = None
    if channel == ActorChannel.OWNER:
        streak = calculate_streak(pet.last_interaction_date, pet.current_streak, today_date_string(now))
        milestone = check_streak_milestone(pet.current_streak, streak.new_streak)

    notifications = []
    if evolution.evolved:
        notifications.append(evolution.message)
    if age.should_update:
        notifications.append(age.message)
    if age.decayed:
        notifications.append(f"Stats decayed by {age.decay_amount} while you were away.")
    if milestone is not None:
        notifications.append(milestone.message)

    return ActionResult(
        pet_id=pet.id,
        owner_id=pet.owner_id,
        action_type=action_type,
        channel=channel,
        actor_id=actor_id,
        performed_at=now,
        expected_version=pet.version,
        effects=effect,
        old_stats=old_stats,
        old_xp=pet.xp,
        vitals=vitals,
        xp=xp,
        stage=evolution.new_stage,
        evolved=evolution.evolved,
        age_in_months=age.new_age,
        aged=age.aged,
        decayed=age.decayed,
        age=age,
        streak=streak,
        streak_milestone=milestone,
        coins_earned=coins_earned,
        cooldown=cooldown,
        notifications=notifications,
    )


class ActionEngine:
    """读取宠物快照与互动统计，交给 resolve_action 结算。"""

    def __init__(
        self,
        store: PetStore,
        log: InteractionLog,
        rng: Optional[random.Random] = None,
        base_cooldown: int = BASE_COOLDOWN_SECONDS,
    ):
        self.store = store
        self.log = log
        self.rng = rng or random.Random()
        self.base_cooldown = base_cooldown

    def _load(self, pet_id: str, actor_id: str) -> Tuple[Pet, ActorChannel]:
        """读取快照并按 actor 是否为主人确定互动身份。"""
        pet = self.store.get(pet_id)
        if pet is None:
            raise PetNotFound(pet_id)
        channel = get_channel_for_actor(pet, actor_id)
        # 访客只能接触开放分享的宠物
        if channel == ActorChannel.VISITOR and not PermissionChecker.can_visit(pet):
            raise PetNotFound(pet_id)
        return pet, channel

    def _social_inputs(self, pet: Pet, actor_id: str, channel: ActorChannel) -> Tuple[int, Optional[datetime]]:
        if channel == ActorChannel.VISITOR:
            return 0, self.log.most_recent(pet.id, actor_id)
        if not pet.sharing_enabled:
            return 0, None
        return self.log.count_unique(pet.id, exclude_actor_id=pet.owner_id).unique_actors, None

    def cooldown_status(self, pet_id: str, actor_id: str, now: Optional[datetime] = None) -> CooldownStatus:
        now = now or datetime.now(timezone.utc)
        pet, channel = self._load(pet_id, actor_id)
        unique, visitor_last_at = self._social_inputs(pet, actor_id, channel)
        return check_cooldown(pet, channel, now, unique, visitor_last_at, self.base_cooldown, actor_id)

    def perform(
        self,
        pet_id: str,
        action_type: str,
        actor_id: str,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        """单一入口：主人 / 访客由 actor_id 是否为宠物主人决定，调用方不能指定。"""
        now = now or datetime.now(timezone.utc)
        pet, channel = self._load(pet_id, actor_id)
        unique, visitor_last_at = self._social_inputs(pet, actor_id, channel)
        return resolve_action(
            pet,
            action_type,
            actor_id,
            now,
            channel=channel,
            unique_interactors=unique,
            visitor_last_at=visitor_last_at,
            rng=self.rng,
            base_cooldown=self.base_cooldown,
        )


def pet_status(vitals: Vitals) -> dict:
    """按平均值给出整体状态；任何一项低于 20 直接判为 critical。"""
    avg = vitals.average()
    if avg < 25:
        status, message = "critical", "Your pet needs immediate attention!"
    elif avg < 40:
        status, message = "unhappy", "Your pet needs some care."
    elif avg < 60:
        status, message = "okay", "Your pet is doing okay."
    elif avg >= 80:
        status, message = "excellent", "Your pet is thriving!"
    else:
        status, message = "happy", "Your pet is doing great!"

    labels = {"fullness": "hungry", "happiness": "sad", "cleanliness": "dirty", "energy": "exhausted"}
    critical = [labels[name] for name in VITAL_NAMES if getattr(vitals, name) < 20]
    if critical:
        status, message = "critical", f"Your pet is {', '.join(critical)}!"
    return {"status": status, "message": message, "avg_stat": round(avg), "critical_stats": critical}


def available_actions(pet: Pet, channel: ActorChannel = ActorChannel.OWNER) -> List[dict]:
    """列出可用动作及其推荐 / 禁用状态（仅供展示，不参与准入判断）。"""
    channel = ActorChannel(channel)
    out = []
    for action_type, effect in ACTION_TABLES[channel].items():
        urgent = False
        disabled = False
        if channel == ActorChannel.OWNER:
            if action_type == "feed":
                urgent, disabled = pet.fullness < 30, pet.fullness >= 95
            elif action_type == "play":
                urgent, disabled = pet.happiness < 30, pet.energy < 15
            elif action_type == "clean":
                urgent, disabled = pet.cleanliness < 30, pet.cleanliness >= 95
            elif action_type == "rest":
                urgent, disabled = pet.energy < 30, pet.energy >= 95
            elif action_type == "exercise":
                disabled = pet.energy < 20 or pet.fullness < 15
            elif action_type == "treat":
                disabled = pet.fullness >= 95
            elif action_type == "work":
                disabled = pet.energy < 20
        locked = pet.stage < effect.min_stage
        out.append({
            "type": action_type,
            "name": effect.name,
            "description": effect.description,
            "urgent": urgent,
            "disabled": disabled or locked,
            "locked": locked,
        })
    return out
