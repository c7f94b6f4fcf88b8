"""冷却计算测试。"""
from datetime import datetime, timedelta, timezone

import pytest

from virtual_pet.sim.cooldown import (
    calculate_effective_cooldown,
    calculate_remaining_cooldown,
    cooldown_breakdown,
    format_cooldown_time,
)

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_effective_cooldown_combines_bonuses() -> None:
    info = calculate_effective_cooldown(streak=7, unique_interactors=10)
    assert info.total_reduction == 360
    assert info.effective_cooldown == 240
    assert info.has_no_cooldown is False


def test_effective_cooldown_floor_is_zero() -> None:
    info = calculate_effective_cooldown(streak=60, unique_interactors=100)
    assert info.effective_cooldown == 0
    assert info.has_no_cooldown is True


def test_never_acted_is_ready() -> None:
    status = calculate_remaining_cooldown(None, NOW)
    assert status.is_on_cooldown is False
    assert status.remaining_seconds == 0


def test_remaining_rounds_up() -> None:
    last = NOW - timedelta(seconds=100, milliseconds=500)
    status = calculate_remaining_cooldown(last, NOW)
    assert status.is_on_cooldown is True
    assert status.remaining_seconds == 500


def test_remaining_after_cooldown() -> None:
    status = calculate_remaining_cooldown(NOW - timedelta(minutes=10), NOW)
    assert status.is_on_cooldown is False
    assert status.remaining_seconds == 0


@pytest.mark.parametrize("seconds,text", [(0, "Ready!"), (-3, "Ready!"), (45, "45s"), (300, "5m"), (330, "5m 30s")])
def test_format_cooldown_time(seconds: int, text: str) -> None:
    assert format_cooldown_time(seconds) == text


def test_cooldown_breakdown() -> None:
    assert cooldown_breakdown(calculate_effective_cooldown()) is None
    assert cooldown_breakdown(calculate_effective_cooldown(60, 100)) == "🎉 No cooldown!"
    assert cooldown_breakdown(calculate_effective_cooldown(3, 5)) == "Reduced by 3m (🔥 -2m, 👥 -1m)"
