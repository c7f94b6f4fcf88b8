"""互动记录数据模型。"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from virtual_pet.pet.models import ActorChannel, as_utc


class InteractionRecord(BaseModel):
    """一次被接受的动作。写入后不再修改或删除。"""
    pet_id: str = Field(..., description="宠物 ID")
    interactor_id: str = Field(..., description="主人用主人 ID，访客用设备级匿名 ID")
    action_type: str = Field(..., description="动作类型")
    channel: ActorChannel = Field(ActorChannel.VISITOR, description="互动身份")
    timestamp: datetime = Field(..., description="发生时间")
    other_pet_id: Optional[str] = Field(None, description="约会对象宠物 ID")
    activity_id: Optional[str] = Field(None, description="约会活动 ID")

    model_config = ConfigDict(use_enum_values=True, frozen=True)

    @field_validator("timestamp", mode="after")
    @classmethod
    def _utc(cls, v):
        return as_utc(v)


class InteractionCount(BaseModel):
    total: int = Field(0, ge=0, description="互动总次数")
    unique_actors: int = Field(0, ge=0, description="独立互动者数")
