"""宠物档案存储、新建与权限测试。"""
import json
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from virtual_pet.pet.models import ActorChannel
from virtual_pet.pet.onboarding import create_pet, generate_shareable_id, new_pet
from virtual_pet.pet.permission import PermissionChecker, get_channel_for_actor
from virtual_pet.pet.store import CommitStatus, PetStore
from virtual_pet.sim.age import evaluate_pet_age
from virtual_pet.sim.cooldown import calculate_remaining_cooldown

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_new_pet_defaults() -> None:
    pet = new_pet("user1", "  ", now=NOW)
    assert pet.name == "My Pet"
    assert pet.vitals.average() == 50
    assert (pet.xp, pet.stage, pet.coins, pet.version) == (0, 1, 100, 0)
    assert pet.last_age_check == NOW
    assert pet.sharing_enabled is False
    assert len(pet.shareable_id) == 12
    assert generate_shareable_id().isalnum()


def test_store_save_load() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = PetStore(base_dir=Path(tmp))
        pet = create_pet("user1", "小白", species="cat", store=store, breed="橘猫", now=NOW)
        assert pet.id in store.list_ids()
        loaded = store.get(pet.id)
        assert loaded is not None
        assert loaded.name == "小白"
        assert loaded.breed == "橘猫"
        assert loaded.created_at == NOW
        assert store.get("missing") is None


def test_store_list_by_owner_and_shared() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = PetStore(base_dir=Path(tmp))
        store.save(new_pet("user1", "A", now=NOW).model_copy(update={"sharing_enabled": True}))
        store.save(new_pet("user1", "B", now=NOW))
        shared = store.save(new_pet("user2", "C", now=NOW).model_copy(update={"sharing_enabled": True}))
        assert len(store.list_by_owner("user1")) == 2
        assert len(store.list_by_owner("user3")) == 0
        assert {p.name for p in store.list_shared()} == {"A", "C"}
        assert store.get_by_shareable_id(shared.shareable_id).name == "C"
        assert store.get_by_shareable_id("nope") is None


def test_unshared_pet_hidden_by_token() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = PetStore(base_dir=Path(tmp))
        pet = store.save(new_pet("user1", "A", now=NOW))
        assert store.get_by_shareable_id(pet.shareable_id) is None


def test_compare_and_set() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = PetStore(base_dir=Path(tmp))
        pet = store.save(new_pet("user1", "A", now=NOW))

        first = store.compare_and_set(pet.id, 0, lambda p: p.model_copy(update={"xp": 5}))
        assert first.committed
        assert first.pet.version == 1
        assert store.get(pet.id).xp == 5

        # 基于旧版本的写入被拒绝
        stale = store.compare_and_set(pet.id, 0, lambda p: p.model_copy(update={"xp": 99}))
        assert stale.status == CommitStatus.CONFLICT
        assert store.get(pet.id).xp == 5

        missing = store.compare_and_set("missing", 0, lambda p: p)
        assert missing.committed is False


def test_subscribe_and_delete() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = PetStore(base_dir=Path(tmp))
        pet = store.save(new_pet("user1", "A", now=NOW))
        seen = []
        unsubscribe = store.subscribe(pet.id, seen.append)

        store.compare_and_set(pet.id, pet.version, lambda p: p.model_copy(update={"happiness": 90}))
        assert seen[-1].happiness == 90

        assert store.delete(pet.id) is True
        assert seen[-1] is None
        assert pet.id not in store.list_ids()
        assert store.delete(pet.id) is False

        unsubscribe()
        store.save(new_pet("user1", "B", now=NOW))
        assert len(seen) == 2


def test_failing_subscriber_does_not_block_write() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = PetStore(base_dir=Path(tmp))
        pet = store.save(new_pet("user1", "A", now=NOW))

        def boom(_) -> None:
            raise RuntimeError("boom")

        store.subscribe(pet.id, boom)
        result = store.compare_and_set(pet.id, pet.version, lambda p: p.model_copy(update={"xp": 1}))
        assert result.committed


def test_permission_checker() -> None:
    pet = new_pet("user1", "A", now=NOW)
    assert get_channel_for_actor(pet, "user1") == ActorChannel.OWNER
    assert get_channel_for_actor(pet, "someone") == ActorChannel.VISITOR
    assert get_channel_for_actor(None, "user1") == ActorChannel.VISITOR
    assert PermissionChecker.can_visit(pet) is False
    assert PermissionChecker.can_equip_accessory(pet.model_copy(update={"stage": 3})) is True
    assert PermissionChecker.can_manage(ActorChannel.OWNER) is True
    assert PermissionChecker.can_manage(ActorChannel.VISITOR) is False


def test_naive_timestamps_loaded_as_utc() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        store = PetStore(base_dir=base)
        pet = store.save(new_pet("user1", "A", now=NOW))
        path = base / f"{pet.id}.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        data.update(
            created_at="2024-01-01T12:00:00",
            last_age_check="2024-01-01T12:00:00",
            last_action_at="2024-01-01T11:55:00",
            visitor_last_action_at={"v1": "2024-01-01T11:58:00"},
        )
        path.write_text(json.dumps(data), encoding="utf-8")

        loaded = store.get(pet.id)
        assert loaded.created_at == NOW
        assert loaded.last_action_at.tzinfo == timezone.utc
        assert loaded.visitor_last_action_at["v1"].tzinfo == timezone.utc
        # 和带时区的 now 比较不会报错
        assert calculate_remaining_cooldown(loaded.last_action_at, NOW).remaining_seconds == 300
        assert evaluate_pet_age(loaded, NOW + timedelta(days=1)).days_since_last_check == 1
