"""月龄与衰减：不跑后台任务，每次宠物被访问时再补算。

1 个真实日 = 1 个虚拟月。跨过 N 天时：
1. 四项状态各减 5 × N，截断到 [0, 100]；
2. 用衰减前后的平均值判断护理是否达标（4 项中至少 3 项 ≥ 45）；
3. 达标则月龄 +N，否则不变，没有部分计入。
"""
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, Field

from virtual_pet.config import AGING_MIN_STATS, AGING_STAT_THRESHOLD, DECAY_PER_DAY
from virtual_pet.pet.models import VITAL_NAMES, Pet, Vitals
from virtual_pet.sim.clamp import clamp_stat

ONE_DAY = timedelta(days=1)


class AverageVitals(BaseModel):
    """衰减前后的平均值，可能是 .5。"""
    fullness: float
    happiness: float
    cleanliness: float
    energy: float


class AgeEvaluation(BaseModel):
    should_update: bool
    aged: bool = False
    decayed: bool = False
    months_gained: int = 0
    decay_amount: int = 0
    days_since_last_check: int = 0
    average_stats: Optional[AverageVitals] = None
    meets_threshold: Optional[bool] = None
    new_stats: Vitals
    new_age: int = Field(..., ge=0)
    next_age_check: Optional[datetime] = Field(None, description="结算后应写回的 last_age_check")
    message: Optional[str] = None


def check_stats_threshold(stats) -> bool:
    """4 项中至少 3 项 ≥ 45。"""
    values = [getattr(stats, name) for name in VITAL_NAMES]
    return sum(1 for v in values if v >= AGING_STAT_THRESHOLD) >= AGING_MIN_STATS


def days_since(last_check: Optional[datetime], now: datetime) -> int:
    if last_check is None or now <= last_check:
        return 0
    return (now - last_check) // ONE_DAY


def evaluate_pet_age(pet: Pet, now: datetime, vitals: Optional[Vitals] = None) -> AgeEvaluation:
    """对 (档案, now) 的纯函数。vitals 不传时用档案上的当前值。"""
    current = vitals or pet.vitals
    days = days_since(pet.last_age_check, now)
    if days == 0:
        return AgeEvaluation(should_update=False, new_stats=current, new_age=pet.age_in_months)

    decay = DECAY_PER_DAY * days
    decayed = Vitals(**{name: clamp_stat(getattr(current, name) - decay) for name in VITAL_NAMES})
    average = AverageVitals(
        **{name: (getattr(current, name) + getattr(decayed, name)) / 2 for name in VITAL_NAMES}
    )
    meets = check_stats_threshold(average)
    gained = days if meets else 0
    if meets:
        message = f"Your pet aged {gained} month{'s' if gained > 1 else ''}!"
    else:
        message = "Your pet did not meet the care threshold to age."
    return AgeEvaluation(
        should_update=True,
        aged=gained > 0,
        decayed=decay > 0,
        months_gained=gained,
        decay_amount=decay,
        days_since_last_check=days,
        average_stats=average,
        meets_threshold=meets,
        new_stats=decayed,
        new_age=pet.age_in_months + gained,
        # 只推进整天，余下不足一天的时间留到下次
        next_age_check=pet.last_age_check + ONE_DAY * days,
        message=message,
    )


def format_age_display(months: int) -> str:
    if not months:
        return "Newborn"
    if months == 1:
        return "1 month old"
    return f"{months} months old"


def age_status(months: int) -> str:
    if months == 0:
        return "Just born!"
    if months <= 2:
        return "Very young"
    if months <= 5:
        return "Young"
    if months <= 10:
        return "Mature"
    if months <= 15:
        return "Senior"
    return "Elder"
