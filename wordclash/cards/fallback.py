# wordclash/cards/fallback.py
from typing import Optional

from ..content.balance import DEFAULTS
from ..engine.dice import rng_for_word
from ..engine.models import Card, CardLogic
from ..engine.rank import derive_rank_from_value

# keyword -> (attack type, special effect); first match wins
ELEMENT_KEYWORDS = [
    (("fire", "burn", "flame"), "fire", "burn"),
    (("water", "ice", "freeze"), "water", "freeze"),
    (("thunder", "electric", "shock"), "electric", "paralyze"),
    (("heal", "cure", "restore"), "heal", "heal"),
]

VOWELS = set("aeiouAEIOU")


def basic_support_fallback(word: Optional[str] = None) -> Card:
    """The card used whenever support generation fails; always the same shape."""
    heal = DEFAULTS["support_heal"]
    return Card(
        word=(word or "").strip() or "support",
        name="Healing Light",
        rank="E",
        attribute="light",
        role="support",
        card_type="heal",
        support_type="heal",
        support_message=f"A gentle light restores {heal} HP.",
        effect_name="Healing Light",
        special_effect="heal",
        target_stat="hp",
        logic=CardLogic(target="player", action_type="heal", value=heal, duration=0),
        base_value=heal,
        final_value=heal,
        hit_rate=100,
        cost=0,
        duration=0,
        description="A basic restorative card.",
        is_fallback=True,
    )


def classify_word(word: str):
    lowered = word.lower()
    for keywords, card_type, special in ELEMENT_KEYWORDS:
        if any(k in lowered for k in keywords):
            return card_type, special
    vowels = sum(1 for ch in word if ch in VOWELS)
    consonants = len(word) - vowels
    if consonants > vowels * 2:
        return "physical", "critical"
    if vowels > consonants:
        return "magic", "penetrate"
    return "normal", ""


def attack_fallback(word: str) -> Card:
    """Build an attack card from the word alone. Seeded by the word, so repeatable."""
    word = (word or "").strip() or "strike"
    r = rng_for_word(word)
    power = min(100, len(word) * 10 + r.randrange(20))
    card_type, special = classify_word(word)
    return Card(
        word=word,
        name=word[:1].upper() + word[1:] + " Strike",
        rank=derive_rank_from_value(power),
        attribute=card_type,
        role="attack",
        card_type=card_type,
        special_effect=special,
        effect_name=special.title() if special else "",
        target_stat="hp",
        logic=CardLogic(target="opponent", action_type="damage", value=power, duration=0),
        base_value=power,
        final_value=power,
        hit_rate=DEFAULTS["attack_hit_rate"],
        cost=0,
        duration=0,
        description=f'A {card_type} technique generated from the word "{word}"',
        is_fallback=True,
    )
