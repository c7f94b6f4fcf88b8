"""通知发送。发送即忘：失败由调用方记录后丢弃，不影响动作本身。"""
import json
import secrets
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

import requests

from virtual_pet.config import NOTIFICATIONS_DIR, NOTIFY_TIMEOUT_SECONDS, WEBHOOK_URL, ensure_dirs
from virtual_pet.notify.models import Notification, PetEvent


class Notifier:
    """通知接口。"""

    def emit(self, owner_id: str, event: PetEvent) -> None:
        raise NotImplementedError


class InboxNotifier(Notifier):
    """按主人 ID 保存到本地 JSON 收件箱，最新的在前。"""
    _lock = threading.Lock()

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            ensure_dirs()
            base_dir = NOTIFICATIONS_DIR
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, owner_id: str) -> Path:
        return self.base_dir / f"inbox_{owner_id}.json"

    def _load(self, owner_id: str) -> List[Notification]:
        path = self._path(owner_id)
        if not path.exists():
            return []
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [Notification.model_validate(n) for n in data.get("notifications", [])]

    def _save(self, owner_id: str, notifications: List[Notification]) -> None:
        with open(self._path(owner_id), "w", encoding="utf-8") as f:
            json.dump(
                {"notifications": [n.model_dump(mode="json") for n in notifications]},
                f,
                indent=2,
                ensure_ascii=False,
            )

    def emit(self, owner_id: str, event: PetEvent) -> None:
        notification = Notification(
            id=secrets.token_hex(8),
            event=event,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            notifications = self._load(owner_id)
            notifications.insert(0, notification)
            self._save(owner_id, notifications)

    def list_for_user(self, owner_id: str, limit: int = 50) -> List[Notification]:
        """最近的通知。"""
        return self._load(owner_id)[:limit]

    def unread_count(self, owner_id: str) -> int:
        return sum(1 for n in self._load(owner_id) if not n.read)

    def mark_read(self, owner_id: str, notification_id: str) -> bool:
        with self._lock:
            notifications = self._load(owner_id)
            for n in notifications:
                if n.id == notification_id:
                    n.read = True
                    self._save(owner_id, notifications)
                    return True
        return False

    def mark_all_read(self, owner_id: str) -> int:
        """全部标为已读，返回本次标记的条数。"""
        with self._lock:
            notifications = self._load(owner_id)
            changed = 0
            for n in notifications:
                if not n.read:
                    n.read = True
                    changed += 1
            if changed:
                self._save(owner_id, notifications)
        return changed


class WebhookNotifier(Notifier):
    """把事件 POST 到外部地址（如推送服务）。"""

    def __init__(self, url: Optional[str] = None, timeout: float = NOTIFY_TIMEOUT_SECONDS):
        self.url = url or WEBHOOK_URL
        self.timeout = timeout

    def emit(self, owner_id: str, event: PetEvent) -> None:
        if not self.url:
            return
        payload = {"owner_id": owner_id, "event": event.model_dump(mode="json")}
        r = requests.post(self.url, json=payload, timeout=self.timeout)
        r.raise_for_status()


class CompositeNotifier(Notifier):
    """依次发给多个通知渠道；某个渠道失败不影响其他渠道。"""

    def __init__(self, notifiers: Iterable[Notifier]):
        self.notifiers = list(notifiers)

    def emit(self, owner_id: str, event: PetEvent) -> None:
        for notifier in self.notifiers:
            try:
                notifier.emit(owner_id, event)
            except Exception as e:
                print(f"[虚拟宠物-通知] {type(notifier).__name__} 发送失败: {e}", file=sys.stderr, flush=True)
