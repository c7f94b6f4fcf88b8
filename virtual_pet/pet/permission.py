"""权限管控：主人拥有全部动作与道具操作，访客只能对开放分享的宠物做有限互动。"""
from typing import Optional

from virtual_pet.config import ACCESSORY_MIN_STAGE
from virtual_pet.pet.models import ActorChannel, Pet


def get_channel_for_actor(pet: Optional[Pet], actor_id: str) -> ActorChannel:
    """根据 actor 是否为主人返回互动身份。无档案视为访客。"""
    if pet is None:
        return ActorChannel.VISITOR
    return ActorChannel.OWNER if actor_id == pet.owner_id else ActorChannel.VISITOR


class PermissionChecker:
    """功能权限检查。"""

    @staticmethod
    def can_visit(pet: Pet) -> bool:
        """访客是否可以通过分享链接互动。"""
        return pet.sharing_enabled

    @staticmethod
    def can_equip_accessory(pet: Pet) -> bool:
        """是否允许购买 / 佩戴饰品（成年期）。"""
        return pet.stage >= ACCESSORY_MIN_STAGE

    @staticmethod
    def can_manage(channel: ActorChannel) -> bool:
        """是否允许商店、分享开关、发起约会等主人操作。"""
        return ActorChannel(channel) == ActorChannel.OWNER
