# wordclash/engine/rank.py
import math
from typing import Any

from ..content.balance import RANK_THRESHOLDS


def derive_rank_from_value(base_value: Any) -> str:
    """Map a power value to its tier label. Bad or missing input counts as 0."""
    try:
        value = float(base_value)
    except (TypeError, ValueError):
        value = 0.0
    if not math.isfinite(value):
        value = 0.0
    for rank, floor in RANK_THRESHOLDS:
        if value >= floor:
            return rank
    return "E"
