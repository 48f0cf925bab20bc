# wordclash/engine/rules.py
import math
import random
from typing import Any, Optional

from .dice import roll


def clamp(x: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, x))


def finite_number(value: Any, default: Optional[float]) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def hit_chance(hit_rate: Any, default: int) -> int:
    return clamp(int(finite_number(hit_rate, default)), 0, 100)


def roll_hit(hit_rate: int, r: random.Random) -> bool:
    # d100 under: 100 always hits, 0 always misses
    return roll("d100", r) <= hit_rate


def floor_stat(value: int) -> int:
    # no ceiling on any stat
    return max(0, int(value))
