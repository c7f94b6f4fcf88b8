"""互动记录：只追加，用于访客冷却与独立访客计数。"""
from virtual_pet.interactions.log import InteractionLog
from virtual_pet.interactions.models import InteractionCount, InteractionRecord

__all__ = [
    "InteractionCount",
    "InteractionRecord",
    "InteractionLog",
]
