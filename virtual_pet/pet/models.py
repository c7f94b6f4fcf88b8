"""宠物档案与互动身份数据模型。"""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from virtual_pet.config import DEFAULT_STAT
from virtual_pet.sim.clamp import clamp_stat
from virtual_pet.sim.progression import stage_from_xp

VITAL_NAMES = ("fullness", "happiness", "cleanliness", "energy")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """不带时区的时间按 UTC 解释。"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ActorChannel(str, Enum):
    """互动身份：主人拥有全部动作，访客只能通过分享链接做有限互动。"""
    OWNER = "owner"        # 宠物主人
    VISITOR = "visitor"    # 匿名访客
    PLAYDATE = "playdate"  # 两只宠物的约会，由一方主人发起


class ItemKind(str, Enum):
    SUPPLY = "supply"        # 可消耗道具
    ACCESSORY = "accessory"  # 饰品，成年后可佩戴


class Vitals(BaseModel):
    """四项 0–100 的状态值。"""
    fullness: int = DEFAULT_STAT
    happiness: int = DEFAULT_STAT
    cleanliness: int = DEFAULT_STAT
    energy: int = DEFAULT_STAT

    @field_validator(*VITAL_NAMES, mode="before")
    @classmethod
    def _fill_and_clamp(cls, v):
        if v is None:
            return DEFAULT_STAT
        return clamp_stat(round(v))

    def average(self) -> float:
        return sum(getattr(self, name) for name in VITAL_NAMES) / len(VITAL_NAMES)


class InventoryItem(BaseModel):
    """背包里的一类物品。"""
    name: str = Field(..., description="物品名，同名合并")
    quantity: int = Field(1, ge=0, description="数量")
    kind: ItemKind = Field(ItemKind.SUPPLY, description="物品类型")

    model_config = ConfigDict(use_enum_values=True)


class Pet(BaseModel):
    """宠物档案。读入时补齐缺省值，后续计算不再做空值兜底。"""
    id: str = Field(..., description="宠物唯一 ID")
    owner_id: str = Field(..., description="主人用户 ID")
    owner_display_label: Optional[str] = Field(None, description="主人展示名")
    name: str = Field(..., description="宠物名字")
    species: str = Field(default="cat", description="物种，如 cat / dog")
    breed: Optional[str] = Field(None, description="品种")
    color: Optional[str] = Field(None, description="毛色")
    notes: Optional[str] = Field(None, description="备注")

    fullness: int = Field(DEFAULT_STAT, description="饱腹 0–100")
    happiness: int = Field(DEFAULT_STAT, description="心情 0–100")
    cleanliness: int = Field(DEFAULT_STAT, description="清洁 0–100")
    energy: int = Field(DEFAULT_STAT, description="体力 0–100")

    xp: int = Field(0, ge=0, description="经验值，只增不减")
    stage: Optional[int] = Field(None, ge=1, le=3, description="成长阶段 1 幼年 / 2 少年 / 3 成年")
    age_in_months: int = Field(0, ge=0, description="虚拟月龄（旧数据字段名为 ageInYears）")

    last_action_at: Optional[datetime] = Field(None, description="主人上次互动时间")
    last_age_check: Optional[datetime] = Field(None, description="上次结算衰减的时间")
    created_at: Optional[datetime] = Field(None, description="创建时间")
    updated_at: Optional[datetime] = Field(None, description="更新时间")

    last_interaction_date: Optional[str] = Field(None, description="主人上次互动的 UTC 日期 YYYY-MM-DD")
    current_streak: int = Field(0, ge=0, description="当前连续天数")
    longest_streak: int = Field(0, ge=0, description="历史最长连续天数")

    coins: int = Field(0, ge=0, description="金币")
    items: List[InventoryItem] = Field(default_factory=list, description="背包")

    sharing_enabled: bool = Field(False, description="是否开放分享链接")
    shareable_id: Optional[str] = Field(None, description="公开分享令牌")
    equipped_accessories: List[str] = Field(default_factory=list, description="已佩戴饰品，成年后生效")
    visitor_last_action_at: Dict[str, datetime] = Field(
        default_factory=dict,
        description="访客 ID → 最近一次被接受的互动时间，随快照一起做条件写入",
    )

    version: int = Field(0, ge=0, description="乐观并发版本号，每次提交 +1")

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)

    @field_validator(*VITAL_NAMES, mode="before")
    @classmethod
    def _fill_vital(cls, v):
        if v is None:
            return DEFAULT_STAT
        return clamp_stat(round(v))

    @field_validator("last_action_at", "last_age_check", "created_at", "updated_at", mode="after")
    @classmethod
    def _utc_timestamp(cls, v):
        return as_utc(v)

    @field_validator("visitor_last_action_at", mode="after")
    @classmethod
    def _utc_visitor_times(cls, v):
        return {actor: as_utc(t) for actor, t in v.items()}

    @field_validator("xp", "age_in_months", "current_streak", "longest_streak", "coins", mode="before")
    @classmethod
    def _fill_counter(cls, v):
        return 0 if v is None else v

    @model_validator(mode="before")
    @classmethod
    def _legacy_age_field(cls, data):
        # 旧数据把月龄存在 ageInYears / age_in_years 里
        if isinstance(data, dict) and "age_in_months" not in data:
            for key in ("ageInYears", "age_in_years"):
                if key in data:
                    data = {**data, "age_in_months": data[key]}
                    break
        return data

    @model_validator(mode="after")
    def _derive_defaults(self) -> "Pet":
        if self.stage is None:
            self.stage = stage_from_xp(self.xp)
        if self.last_age_check is None:
            self.last_age_check = self.created_at
        self.longest_streak = max(self.longest_streak, self.current_streak)
        return self

    @property
    def vitals(self) -> Vitals:
        return Vitals(
            fullness=self.fullness,
            happiness=self.happiness,
            cleanliness=self.cleanliness,
            energy=self.energy,
        )

    @property
    def active_accessories(self) -> List[str]:
        """实际生效的饰品：只有成年期才显示。"""
        return list(self.equipped_accessories) if self.stage == 3 else []

    def item(self, name: str) -> Optional[InventoryItem]:
        for it in self.items:
            if it.name == name:
                return it
        return None
