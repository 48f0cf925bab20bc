# wordclash/engine/effects.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .models import Player
from .rules import floor_stat

EFFECT_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "enchant": {
        "type": "enchant",
        "name": "Enchant",
        "stat": "hp",
        "delta": 0,
        "duration": 1,
    },
    "burn": {
        "type": "burn",
        "name": "Burn",
        "stat": "hp",
        "delta": 0,
        "duration": 1,
    },
}


def build_effect(effect_id: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    if effect_id not in EFFECT_TEMPLATES:
        return {}
    effect = dict(EFFECT_TEMPLATES[effect_id])
    effect["id"] = effect_id
    if overrides:
        effect.update(overrides)
    return effect


def apply_stat(target: Player, stat: str, delta: int) -> int:
    """Add delta to a stat, flooring at 0. Returns the delta actually applied."""
    before = getattr(target, stat)
    after = floor_stat(before + delta)
    setattr(target, stat, after)
    return after - before


def add_enchant(target: Player, stat: str, value: int, duration: int, name: str = "Enchant") -> None:
    target.effects.append(build_effect("enchant", {
        "name": name,
        "stat": stat,
        "delta": int(value),
        "duration": int(duration),
    }))


def apply_burn(target: Player, value: int, duration: int, source: str = "Unknown") -> None:
    """Attach a burn, or refresh the existing one to the stronger value/longer duration."""
    for effect in target.effects:
        if effect.get("type") == "burn":
            effect["delta"] = min(int(effect.get("delta", 0) or 0), -int(value))
            effect["duration"] = max(int(effect.get("duration", 0) or 0), int(duration))
            effect["source"] = str(source)
            return
    target.effects.append(build_effect("burn", {
        "delta": -int(value),
        "duration": int(duration),
        "source": str(source),
    }))


def tick_durations(effects: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Decrement duration; drop expired ones."""
    new_list: List[Dict[str, Any]] = []
    for e in effects:
        d = int(e.get("duration", 0) or 0) - 1
        if d > 0:
            e2 = dict(e)
            e2["duration"] = d
            new_list.append(e2)
    return new_list


def tick_effects(ps: Player, log: List[str], label: str) -> Dict[str, int]:
    """Apply every running effect once, then tick durations. Returns stat deltas."""
    deltas: Dict[str, int] = {}
    for effect in ps.effects:
        stat = effect.get("stat", "hp")
        dealt = apply_stat(ps, stat, int(effect.get("delta", 0) or 0))
        if not dealt:
            continue
        deltas[stat] = deltas.get(stat, 0) + dealt
        if effect.get("type") == "burn":
            log.append(f"{label} burns for {-dealt} {stat}.")
        else:
            log.append(f"{label} gains {dealt} {stat} from {effect.get('name', 'an enchant')}.")
    ps.effects = tick_durations(ps.effects)
    return deltas
