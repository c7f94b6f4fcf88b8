"""宠物档案、存储与主人操作。"""
from virtual_pet.pet.models import ActorChannel, InventoryItem, ItemKind, Pet, Vitals
from virtual_pet.pet.onboarding import create_pet, generate_shareable_id, new_pet
from virtual_pet.pet.permission import PermissionChecker, get_channel_for_actor
from virtual_pet.pet.store import CommitResult, CommitStatus, PetStore

__all__ = [
    "ActorChannel",
    "InventoryItem",
    "ItemKind",
    "Pet",
    "Vitals",
    "create_pet",
    "generate_shareable_id",
    "new_pet",
    "PermissionChecker",
    "get_channel_for_actor",
    "CommitResult",
    "CommitStatus",
    "PetStore",
]
