"""通知测试：收件箱、HTTP 回调与组合发送。"""
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest
import requests

from virtual_pet.notify import notifier as notifier_module
from virtual_pet.notify.models import PetEvent, StatChange
from virtual_pet.notify.notifier import CompositeNotifier, InboxNotifier, Notifier, WebhookNotifier

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_event(action: str = "pet") -> PetEvent:
    return PetEvent(
        owner_id="u1",
        pet_id="p1",
        pet_name="喵喵",
        action_type=action,
        performed_by="visitor",
        interactor_id="v1",
        stat_changes={"happiness": StatChange(before=50, after=65)},
        messages=[],
        timestamp=NOW,
    )


def test_inbox_newest_first_and_read_flags() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        inbox = InboxNotifier(base_dir=Path(tmp))
        inbox.emit("u1", make_event("pet"))
        inbox.emit("u1", make_event("treat"))
        items = inbox.list_for_user("u1")
        assert [n.event.action_type for n in items] == ["treat", "pet"]
        assert inbox.unread_count("u1") == 2
        assert inbox.list_for_user("u2") == []

        assert inbox.mark_read("u1", items[0].id) is True
        assert inbox.mark_read("u1", "nope") is False
        assert inbox.unread_count("u1") == 1
        assert inbox.mark_all_read("u1") == 1
        assert inbox.unread_count("u1") == 0
        assert len(inbox.list_for_user("u1", limit=1)) == 1


class FakeResponse:
    def __init__(self, status: int = 200):
        self.status = status

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise requests.HTTPError(f"status {self.status}")


def test_webhook_posts_event(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json, timeout))
        return FakeResponse()

    monkeypatch.setattr(notifier_module.requests, "post", fake_post)
    WebhookNotifier(url="http://hook.test/pets", timeout=3).emit("u1", make_event())
    assert len(calls) == 1
    url, payload, timeout = calls[0]
    assert url == "http://hook.test/pets"
    assert payload["owner_id"] == "u1"
    assert payload["event"]["stat_changes"]["happiness"] == {"before": 50, "after": 65}
    assert timeout == 3


def test_webhook_without_url_is_noop(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args, **kwargs):
        raise AssertionError("should not post")

    monkeypatch.setattr(notifier_module.requests, "post", fail)
    notifier = WebhookNotifier(url="")
    notifier.url = ""
    notifier.emit("u1", make_event())


def test_webhook_http_error_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(notifier_module.requests, "post", lambda *a, **kw: FakeResponse(500))
    with pytest.raises(requests.HTTPError):
        WebhookNotifier(url="http://hook.test").emit("u1", make_event())


def test_composite_continues_after_failure() -> None:
    class Broken(Notifier):
        def emit(self, owner_id: str, event: PetEvent) -> None:
            raise RuntimeError("down")

    with tempfile.TemporaryDirectory() as tmp:
        inbox = InboxNotifier(base_dir=Path(tmp))
        CompositeNotifier([Broken(), inbox]).emit("u1", make_event())
        assert inbox.unread_count("u1") == 1
