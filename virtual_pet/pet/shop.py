"""主人操作：商店购买、使用道具、分享开关、佩戴饰品。

与动作引擎同样走带版本号的条件写入；道具效果同样截断到 [0, 100]，不会绕过状态约束。
"""
from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, Field

from virtual_pet.config import ACCESSORY_MIN_STAGE
from virtual_pet.pet.models import InventoryItem, ItemKind, Pet
from virtual_pet.pet.onboarding import generate_shareable_id
from virtual_pet.pet.permission import PermissionChecker
from virtual_pet.pet.store import PetStore
from virtual_pet.sim.clamp import clamp_stat
from virtual_pet.sim.errors import (
    InsufficientCoins,
    ItemNotOwned,
    StageLocked,
)


class StoreItem(BaseModel):
    """商店商品。"""
    name: str
    price: int = Field(..., gt=0)
    kind: ItemKind = ItemKind.SUPPLY
    description: str = ""
    effect: Dict[str, int] = Field(default_factory=dict, description="使用时对状态的增减")


STORE_ITEMS = {
    "Food": StoreItem(name="Food", price=10, description="Boosts fullness", effect={"fullness": 20}),
    "Toy": StoreItem(name="Toy", price=15, description="Increases happiness", effect={"happiness": 20}),
    "Soap": StoreItem(name="Soap", price=12, description="Improves cleanliness", effect={"cleanliness": 25}),
    "Energy Drink": StoreItem(name="Energy Drink", price=20, description="Restores energy", effect={"energy": 30}),
}

ACCESSORY_ITEMS = {
    "Hat": StoreItem(name="Hat", price=50, kind=ItemKind.ACCESSORY, description="Stylish hat for your pet"),
    "Umbrella": StoreItem(name="Umbrella", price=40, kind=ItemKind.ACCESSORY, description="Keep dry in style"),
}


def catalog_item(name: str) -> Optional[StoreItem]:
    return STORE_ITEMS.get(name) or ACCESSORY_ITEMS.get(name)


def _touch(pet: Pet, **update) -> Pet:
    return pet.model_copy(update={**update, "updated_at": datetime.now(timezone.utc)})


def purchase_item(store: PetStore, pet_id: str, name: str) -> Pet:
    """花金币购买，同名物品数量 +1。饰品需成年期。"""
    item = catalog_item(name)
    if item is None:
        raise ItemNotOwned(name)

    def mutate(pet: Pet) -> Pet:
        if item.kind == ItemKind.ACCESSORY and not PermissionChecker.can_equip_accessory(pet):
            raise StageLocked(item.name, ACCESSORY_MIN_STAGE)
        if pet.coins < item.price:
            raise InsufficientCoins(item.price, pet.coins)
        items = [it.model_copy() for it in pet.items]
        for it in items:
            if it.name == item.name:
                it.quantity += 1
                break
        else:
            items.append(InventoryItem(name=item.name, quantity=1, kind=item.kind))
        return _touch(pet, coins=pet.coins - item.price, items=items)

    return store.update(pet_id, mutate)


def use_item(store: PetStore, pet_id: str, name: str) -> Pet:
    """消耗一个道具并结算其效果；数量归零后从背包移除。"""
    item = STORE_ITEMS.get(name)

    def mutate(pet: Pet) -> Pet:
        owned = pet.item(name)
        if item is None or owned is None or owned.quantity <= 0:
            raise ItemNotOwned(name)
        items = []
        for it in pet.items:
            if it.name == name:
                if it.quantity > 1:
                    items.append(it.model_copy(update={"quantity": it.quantity - 1}))
                continue
            items.append(it)
        stats = {stat: clamp_stat(getattr(pet, stat) + delta) for stat, delta in item.effect.items()}
        return _touch(pet, items=items, **stats)

    return store.update(pet_id, mutate)


def toggle_sharing(store: PetStore, pet_id: str, enabled: bool) -> Pet:
    """开关分享；没有分享令牌时顺便生成一个。"""

    def mutate(pet: Pet) -> Pet:
        update = {"sharing_enabled": enabled}
        if not pet.shareable_id:
            update["shareable_id"] = generate_shareable_id()
        return _touch(pet, **update)

    return store.update(pet_id, mutate)


def toggle_accessory(store: PetStore, pet_id: str, name: str) -> Pet:
    """佩戴 / 取下已购买的饰品，仅成年期可用。"""

    def mutate(pet: Pet) -> Pet:
        if not PermissionChecker.can_equip_accessory(pet):
            raise StageLocked(name, ACCESSORY_MIN_STAGE)
        owned = pet.item(name)
        if name not in ACCESSORY_ITEMS or owned is None:
            raise ItemNotOwned(name)
        equipped = list(pet.equipped_accessories)
        if name in equipped:
            equipped.remove(name)
        else:
            equipped.append(name)
        return _touch(pet, equipped_accessories=equipped)

    return store.update(pet_id, mutate)
