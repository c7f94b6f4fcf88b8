"""数值工具：截断与百分比。"""
from virtual_pet.config import STAT_MAX, STAT_MIN


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def clamp_stat(value: int) -> int:
    """把属性值截断到 [0, 100]。"""
    return int(clamp(value, STAT_MIN, STAT_MAX))


def round_to_decimal(value: float, decimals: int = 2) -> float:
    factor = 10 ** decimals
    return round(value * factor) / factor


def calculate_percentage(current: float, maximum: float) -> float:
    """current 占 maximum 的百分比，结果限定在 0–100；maximum 为 0 时返回 0。"""
    if maximum == 0:
        return 0
    return clamp(current / maximum * 100, 0, 100)
