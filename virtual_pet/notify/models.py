"""通知数据模型。"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from virtual_pet.pet.models import ActorChannel


class StatChange(BaseModel):
    before: int
    after: int


class PetEvent(BaseModel):
    """一次被接受的动作，发给宠物主人。"""
    owner_id: str = Field(..., description="接收通知的主人 ID")
    pet_id: str = Field(..., description="宠物 ID")
    pet_name: str = Field(..., description="宠物名字")
    action_type: str = Field(..., description="动作类型")
    performed_by: ActorChannel = Field(..., description="主人 / 访客 / 约会")
    interactor_id: str = Field(..., description="执行动作的人")
    stat_changes: Dict[str, StatChange] = Field(default_factory=dict, description="各项状态前后对比")
    messages: List[str] = Field(default_factory=list, description="进化 / 成长 / 衰减 / 里程碑提示")
    metadata: Dict[str, str] = Field(default_factory=dict, description="附加信息，如约会活动与对方宠物名")
    timestamp: datetime = Field(..., description="发生时间")

    model_config = ConfigDict(use_enum_values=True)


class Notification(BaseModel):
    """收件箱里的一条通知。"""
    id: str = Field(..., description="通知 ID")
    event: PetEvent
    read: bool = Field(False, description="是否已读")
    created_at: Optional[datetime] = Field(None, description="入箱时间")
