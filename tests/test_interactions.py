"""互动记录测试。"""
import json
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from virtual_pet.interactions.log import InteractionLog
from virtual_pet.interactions.models import InteractionRecord
from virtual_pet.pet.models import ActorChannel

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def record(pet_id: str, who: str, minutes: int = 0, channel: ActorChannel = ActorChannel.VISITOR) -> InteractionRecord:
    return InteractionRecord(
        pet_id=pet_id,
        interactor_id=who,
        action_type="pet",
        channel=channel,
        timestamp=NOW + timedelta(minutes=minutes),
    )


def test_append_and_list() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        log = InteractionLog(data_dir=Path(tmp))
        log.append(record("p1", "v1", minutes=5))
        log.append(record("p1", "v2", minutes=1))
        log.append(record("p2", "v1", minutes=3))
        assert [r.interactor_id for r in log.list_for_pet("p1")] == ["v2", "v1"]
        assert [r.pet_id for r in log.list_for_interactor("v1")] == ["p2", "p1"]
        assert log.list_for_pet("p3") == []


def test_count_unique_excludes_owner() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        log = InteractionLog(data_dir=Path(tmp))
        log.append(record("p1", "v1"))
        log.append(record("p1", "v1", minutes=20))
        log.append(record("p1", "v2"))
        log.append(record("p1", "owner", channel=ActorChannel.OWNER))
        count = log.count_unique("p1", exclude_actor_id="owner")
        assert count.total == 3
        assert count.unique_actors == 2
        assert log.count_unique("p1").unique_actors == 3


def test_most_recent() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        log = InteractionLog(data_dir=Path(tmp))
        log.append(record("p1", "v1", minutes=1))
        log.append(record("p1", "v1", minutes=9))
        assert log.most_recent("p1", "v1") == NOW + timedelta(minutes=9)
        assert log.most_recent("p1", "v2") is None


def test_corrupt_record_skipped() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        log = InteractionLog(data_dir=base)
        log.append(record("p1", "v1"))
        path = base / "p1.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        data["records"].append({"pet_id": "p1"})
        path.write_text(json.dumps(data), encoding="utf-8")
        assert len(log.list_for_pet("p1")) == 1


def test_naive_timestamp_read_as_utc() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        log = InteractionLog(data_dir=base)
        log.append(record("p1", "v1"))
        path = base / "p1.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        data["records"][0]["timestamp"] = "2024-01-01T12:00:00"
        path.write_text(json.dumps(data), encoding="utf-8")

        loaded = log.list_for_pet("p1")[0]
        assert loaded.timestamp.tzinfo == timezone.utc
        assert log.most_recent("p1", "v1") == NOW
