"""宠物档案本地存储：按 ID 一文件，带版本号的条件写入与单宠物订阅。"""
import json
import os
import sys
import threading
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

from virtual_pet.config import PETS_DIR, ensure_dirs
from virtual_pet.pet.models import Pet
from virtual_pet.sim.errors import PetNotFound, WriteConflict

Subscriber = Callable[[Optional[Pet]], None]

# 同一目录共用一把锁，保证同进程内多个 PetStore 实例的读-比较-写是原子的
_LOCKS: Dict[str, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(base_dir: Path) -> threading.RLock:
    key = str(base_dir.resolve())
    with _LOCKS_GUARD:
        return _LOCKS.setdefault(key, threading.RLock())


class CommitStatus(str, Enum):
    COMMITTED = "committed"
    CONFLICT = "conflict"


class CommitResult(BaseModel):
    status: CommitStatus
    pet: Optional[Pet] = None

    @property
    def committed(self) -> bool:
        return self.status == CommitStatus.COMMITTED


class PetStore:
    """档案存储（JSON 文件，便于 MVP；后续可换数据库）。"""
    _index_file = "index.json"

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            ensure_dirs()
            base_dir = PETS_DIR
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._lock = _lock_for(self.base_dir)
        self._subscribers: Dict[str, List[Subscriber]] = {}

    def _index_path(self) -> Path:
        return self.base_dir / self._index_file

    def _pet_path(self, pet_id: str) -> Path:
        return self.base_dir / f"{pet_id}.json"

    def _write(self, pet: Pet) -> None:
        path = self._pet_path(pet.id)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(pet.model_dump_json(indent=2))
        os.replace(tmp, path)

    def _save_index(self, ids: List[str]) -> None:
        with open(self._index_path(), "w", encoding="utf-8") as f:
            json.dump({"ids": ids}, f, indent=2, ensure_ascii=False)

    def _publish(self, pet_id: str, pet: Optional[Pet]) -> None:
        for callback in list(self._subscribers.get(pet_id, [])):
            try:
                callback(pet)
            except Exception as e:
                print(f"[虚拟宠物-存储] 订阅回调失败 pet={pet_id}: {e}", file=sys.stderr, flush=True)

    def list_ids(self) -> List[str]:
        """列出所有宠物 ID。"""
        if not self._index_path().exists():
            return []
        with open(self._index_path(), "r", encoding="utf-8") as f:
            data = json.load(f)
        return data.get("ids", [])

    def get(self, pet_id: str) -> Optional[Pet]:
        """读取快照；不存在返回 None。读入时补齐缺省值。"""
        path = self._pet_path(pet_id)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return Pet.model_validate(data)

    def get_by_shareable_id(self, shareable_id: str) -> Optional[Pet]:
        """按分享令牌查找；未开放分享的宠物视为不存在。"""
        for pet_id in self.list_ids():
            p = self.get(pet_id)
            if p and p.shareable_id == shareable_id:
                return p if p.sharing_enabled else None
        return None

    def save(self, pet: Pet) -> Pet:
        """无条件保存（用于新建）并更新索引。"""
        now = datetime.now(timezone.utc)
        if not pet.created_at:
            pet.created_at = now
        if not pet.last_age_check:
            pet.last_age_check = pet.created_at
        pet.updated_at = pet.updated_at or now
        with self._lock:
            self._write(pet)
            ids = self.list_ids()
            if pet.id not in ids:
                ids.append(pet.id)
                self._save_index(ids)
        self._publish(pet.id, pet)
        return pet

    def compare_and_set(
        self,
        pet_id: str,
        expected_version: int,
        mutation: Callable[[Pet], Pet],
    ) -> CommitResult:
        """当前版本等于 expected_version 时才写入 mutation(当前快照)，版本号 +1。

        版本不符或宠物已被删除时返回 CONFLICT，不做任何写入。
        """
        with self._lock:
            current = self.get(pet_id)
            if current is None or current.version != expected_version:
                return CommitResult(status=CommitStatus.CONFLICT, pet=current)
            updated = mutation(current).model_copy(update={"id": pet_id, "version": current.version + 1})
            self._write(updated)
        self._publish(pet_id, updated)
        return CommitResult(status=CommitStatus.COMMITTED, pet=updated)

    def update(self, pet_id: str, mutation: Callable[[Pet], Pet], attempts: int = 2) -> Pet:
        """读-改-条件写；版本冲突时基于新快照重试，仍冲突抛 WriteConflict。"""
        for _ in range(attempts):
            pet = self.get(pet_id)
            if pet is None:
                raise PetNotFound(pet_id)
            result = self.compare_and_set(pet_id, pet.version, mutation)
            if result.committed:
                return result.pet
        raise WriteConflict(pet_id)

    def delete(self, pet_id: str) -> bool:
        """删除档案。互动记录保留，不在此清理。"""
        with self._lock:
            path = self._pet_path(pet_id)
            if not path.exists():
                return False
            path.unlink()
            ids = self.list_ids()
            if pet_id in ids:
                ids.remove(pet_id)
                self._save_index(ids)
        self._publish(pet_id, None)
        return True

    def list_by_owner(self, owner_id: str) -> List[Pet]:
        """列出某用户拥有的宠物。"""
        out = []
        for pet_id in self.list_ids():
            p = self.get(pet_id)
            if p and p.owner_id == owner_id:
                out.append(p)
        return out

    def list_shared(self) -> List[Pet]:
        """列出开放分享的宠物。"""
        out = []
        for pet_id in self.list_ids():
            p = self.get(pet_id)
            if p and p.sharing_enabled:
                out.append(p)
        return out

    def subscribe(self, pet_id: str, callback: Subscriber) -> Callable[[], None]:
        """订阅某只宠物的最新快照（删除时推送 None），返回取消订阅函数。"""
        self._subscribers.setdefault(pet_id, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(pet_id, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe
