"""互动记录存储：按宠物一个 JSON 文件，只追加。"""
import json
import os
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from virtual_pet.config import INTERACTIONS_DIR, ensure_dirs
from virtual_pet.interactions.models import InteractionCount, InteractionRecord


class InteractionLog:
    """互动记录的追加与查询。"""
    _lock = threading.Lock()

    def __init__(self, data_dir: Optional[Path] = None):
        if data_dir is None:
            ensure_dirs()
            data_dir = INTERACTIONS_DIR
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, pet_id: str) -> Path:
        return self.data_dir / f"{pet_id}.json"

    def _load(self, path: Path) -> List[InteractionRecord]:
        if not path.exists():
            return []
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        out = []
        for item in data.get("records", []):
            try:
                out.append(InteractionRecord.model_validate(item))
            except ValueError as e:
                print(f"[虚拟宠物-互动] 跳过损坏的记录 {path.name}: {e}", file=sys.stderr, flush=True)
        return out

    def append(self, record: InteractionRecord) -> None:
        """追加一条记录。"""
        path = self._path(record.pet_id)
        with self._lock:
            records = self._load(path)
            records.append(record)
            tmp = path.with_suffix(".json.tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump({"records": [r.model_dump(mode="json") for r in records]}, f, indent=2, ensure_ascii=False)
            os.replace(tmp, path)

    def list_for_pet(self, pet_id: str) -> List[InteractionRecord]:
        """某宠物的全部记录，按时间升序。"""
        return sorted(self._load(self._path(pet_id)), key=lambda r: r.timestamp)

    def list_for_interactor(self, interactor_id: str) -> List[InteractionRecord]:
        """某互动者在所有宠物上的记录，按时间升序。"""
        out = []
        for path in self.data_dir.glob("*.json"):
            out.extend(r for r in self._load(path) if r.interactor_id == interactor_id)
        return sorted(out, key=lambda r: r.timestamp)

    def count_unique(self, pet_id: str, exclude_actor_id: Optional[str] = None) -> InteractionCount:
        """互动总数与独立互动者数；exclude_actor_id（通常是主人）不计入。"""
        records = [r for r in self._load(self._path(pet_id)) if r.interactor_id != exclude_actor_id]
        return InteractionCount(
            total=len(records),
            unique_actors=len({r.interactor_id for r in records}),
        )

    def most_recent(self, pet_id: str, actor_id: str) -> Optional[datetime]:
        """该互动者在这只宠物上的最近一次时间；没有则 None。"""
        times = [r.timestamp for r in self._load(self._path(pet_id)) if r.interactor_id == actor_id]
        return max(times) if times else None

    def most_recent_by_interactor(self, interactor_id: str, action_type: Optional[str] = None) -> Optional[datetime]:
        """该互动者在所有宠物上的最近一次时间，可按动作类型过滤。"""
        times = [
            r.timestamp
            for r in self.list_for_interactor(interactor_id)
            if action_type is None or r.action_type == action_type
        ]
        return max(times) if times else None
