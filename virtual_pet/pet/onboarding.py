"""新建宠物：初始状态全为 50，幼年期，未开放分享，并生成分享令牌。"""
import secrets
import string
import uuid
from datetime import datetime, timezone
from typing import Optional

from virtual_pet.config import DEFAULT_STAT, SHAREABLE_ID_LENGTH, STARTING_COINS
from virtual_pet.pet.models import Pet
from virtual_pet.pet.store import PetStore

_SHARE_ALPHABET = string.ascii_letters + string.digits


def generate_shareable_id(length: int = SHAREABLE_ID_LENGTH) -> str:
    """12 位字母数字随机串。"""
    return "".join(secrets.choice(_SHARE_ALPHABET) for _ in range(length))


def new_pet(
    owner_id: str,
    name: str,
    species: str = "cat",
    breed: Optional[str] = None,
    color: Optional[str] = None,
    notes: Optional[str] = None,
    owner_display_label: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Pet:
    """构造一只新宠物（不落盘）。"""
    now = now or datetime.now(timezone.utc)
    return Pet(
        id=f"pet_{owner_id}_{uuid.uuid4().hex[:8]}",
        owner_id=owner_id,
        owner_display_label=owner_display_label,
        name=name.strip() or "My Pet",
        species=species,
        breed=breed,
        color=color,
        notes=notes,
        fullness=DEFAULT_STAT,
        happiness=DEFAULT_STAT,
        cleanliness=DEFAULT_STAT,
        energy=DEFAULT_STAT,
        xp=0,
        stage=1,
        coins=STARTING_COINS,
        created_at=now,
        updated_at=now,
        last_age_check=now,
        shareable_id=generate_shareable_id(),
        sharing_enabled=False,
    )


def create_pet(
    owner_id: str,
    name: str,
    species: str = "cat",
    store: Optional[PetStore] = None,
    now: Optional[datetime] = None,
    **details,
) -> Pet:
    """新建并保存宠物档案。"""
    store = store or PetStore()
    pet = new_pet(owner_id, name, species=species, now=now, **details)
    return store.save(pet)
