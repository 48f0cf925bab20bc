# wordclash/cards/normalize.py
"""Turn untrusted generation output into a canonical ``Card``.

Support results are repaired field by field once they pass ``is_support_like``;
attack results are only mapped onto the schema. Anything that still lacks a
finite ``finalValue`` is rejected with ``GenerationShapeInvalid``.
"""
from typing import Any, Dict, Optional

from ..content.balance import DEFAULTS, STATS, SUPPORT_TYPES
from ..engine.models import Card, CardLogic
from ..engine.rank import derive_rank_from_value
from ..engine.rules import finite_number, hit_chance
from ..errors import GenerationShapeInvalid


def _text(raw: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def is_support_like(raw: Dict[str, Any]) -> bool:
    if str(raw.get("role") or "").lower() == "support":
        return True
    for key in ("type", "cardType"):
        if str(raw.get(key) or "").lower() in SUPPORT_TYPES:
            return True
    return bool(raw.get("supportType"))


def normalize_support_payload(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Repair a support-like result. Returns a new dict; ``raw`` is untouched."""
    card = dict(raw)
    card["role"] = "support"
    card["effect"] = "support"

    card_type = _text(card, "cardType", "type")
    support_type = _text(card, "supportType") or card_type or "heal"
    support_type = support_type.lower()
    card_type = card_type or support_type
    if not _text(card, "cardType"):
        card["cardType"] = card_type
    if not _text(card, "type"):
        card["type"] = card_type
    card["supportType"] = support_type

    if support_type == "heal" and not _text(card, "supportMessage"):
        heal = DEFAULTS["support_heal"]
        card["supportMessage"] = f"Restores {heal} HP."
        # whatever logic came with it, a bare heal card heals its caster
        card["logic"] = {"target": "player", "actionType": "heal", "value": heal, "duration": 0}

    if not _text(card, "effectName"):
        card["effectName"] = _text(card, "specialEffect") or "Support Effect"

    final_value = finite_number(card.get("finalValue"), None)
    if final_value is None:
        final_value = DEFAULTS["support_heal"]
    card["finalValue"] = final_value
    card["baseValue"] = finite_number(card.get("baseValue"), final_value)
    return card


def _logic_from(raw: Dict[str, Any], role: str, card_type: str, final_value: float) -> CardLogic:
    if role == "support":
        default = CardLogic(
            target="player",
            action_type=card_type if card_type in SUPPORT_TYPES else "buff",
            value=final_value,
        )
    else:
        default = CardLogic(target="opponent", action_type="damage", value=final_value)

    logic = raw.get("logic")
    if not isinstance(logic, dict):
        default.duration = max(0, int(finite_number(raw.get("duration"), 0)))
        return default

    target = str(logic.get("target") or default.target).lower()
    if target in ("self", "user", "caster"):
        target = "player"
    elif target in ("enemy", "foe", "target"):
        target = "opponent"
    elif target not in ("player", "opponent"):
        target = default.target
    return CardLogic(
        target=target,
        action_type=str(logic.get("actionType") or default.action_type).lower(),
        value=finite_number(logic.get("value"), final_value),
        duration=max(0, int(finite_number(logic.get("duration", raw.get("duration")), 0))),
    )


def to_card(raw: Dict[str, Any], word: str, role: str) -> Card:
    final_value = finite_number(raw.get("finalValue"), None)
    if final_value is None:
        raise GenerationShapeInvalid(f"card for {word!r} has no usable finalValue")

    # the slot decides the role, not the payload
    role = "support" if str(role).lower() == "support" else "attack"
    card_type = (_text(raw, "type", "cardType") or ("heal" if role == "support" else "normal")).lower()
    base_value = finite_number(raw.get("baseValue"), final_value)
    logic = _logic_from(raw, role, card_type, final_value)

    raw_logic = raw.get("logic") if isinstance(raw.get("logic"), dict) else {}
    target_stat = str(raw.get("targetStat") or raw_logic.get("targetStat") or "hp").lower()
    if target_stat not in STATS:
        target_stat = "hp"

    support_type = _text(raw, "supportType")
    return Card(
        word=word,
        name=_text(raw, "name", "cardName") or f"{word.title()} Card",
        rank=derive_rank_from_value(base_value),
        attribute=_text(raw, "attribute", "element") or "",
        role=role,
        card_type=card_type,
        support_type=support_type.lower() if support_type else None,
        support_message=_text(raw, "supportMessage"),
        effect_name=_text(raw, "effectName") or "",
        special_effect=(_text(raw, "specialEffect") or "").lower(),
        target_stat=target_stat,
        logic=logic,
        base_value=base_value,
        final_value=final_value,
        hit_rate=hit_chance(raw.get("hitRate"), 100 if role == "support" else DEFAULTS["attack_hit_rate"]),
        cost=max(0, int(finite_number(raw.get("cost"), 0))),
        duration=logic.duration,
        description=_text(raw, "description", "flavor") or "",
    )
