"""Scenarios for rank derivation and the card generation pipeline.

Providers are faked; nothing here talks to the network.
"""

from __future__ import annotations

import asyncio
import math
import sys
import time
from pathlib import Path
from typing import List, Tuple

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from wordclash.cards.fallback import attack_fallback, basic_support_fallback, classify_word
from wordclash.cards.generator import CardGenerator, generate_card_with_timeout
from wordclash.cards.normalize import is_support_like
from wordclash.cards.parsing import parse_card_json
from wordclash.cards.provider import AnthropicCardProvider, CardProvider
from wordclash.engine.models import Card
from wordclash.engine.rank import derive_rank_from_value
from wordclash.errors import GenerationTransportFailure

RANK_ORDER = ["E", "D", "C", "B", "A", "S", "EX"]


class StaticProvider(CardProvider):
    def __init__(self, payload):
        self.payload = payload

    async def generate(self, word, role):
        return self.payload


class HangingProvider(CardProvider):
    def __init__(self):
        self.cancelled = False

    async def generate(self, word, role):
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class LateProvider(CardProvider):
    """Ignores cancellation and answers anyway once ``linger`` seconds have passed."""

    def __init__(self, payload, linger):
        self.payload = payload
        self.linger = linger
        self.cancelled = False

    async def generate(self, word, role):
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            await asyncio.sleep(self.linger)
        return self.payload


class RaisingProvider(CardProvider):
    def __init__(self, exc):
        self.exc = exc

    async def generate(self, word, role):
        raise self.exc


def generate(word, role, provider, fallback=None, timeout_ms=2000) -> Card:
    return asyncio.run(generate_card_with_timeout(word, role, fallback, timeout_ms, provider))


def assert_support_invariants(card: Card) -> None:
    assert card.role == "support", card.role
    assert isinstance(card.final_value, (int, float)) and math.isfinite(card.final_value)
    assert isinstance(card.base_value, (int, float)) and math.isfinite(card.base_value)
    assert card.support_type and card.support_type == card.support_type.lower()
    assert card.card_type


def scenario_rank_boundaries():
    cases = [
        (10, "E"), (11, "D"),
        (30, "D"), (31, "C"),
        (60, "C"), (61, "B"),
        (85, "B"), (86, "A"),
        (95, "A"), (96, "S"),
        (998, "S"), (999, "EX"),
        (0, "E"), (5000, "EX"),
    ]
    for value, expected in cases:
        assert derive_rank_from_value(value) == expected, f"{value} -> {derive_rank_from_value(value)}"
    return True


def scenario_rank_total_on_bad_input():
    for value in (None, "abc", float("nan"), float("inf"), -float("inf"), -50, [], {}):
        assert derive_rank_from_value(value) == "E", value
    assert derive_rank_from_value("61") == "B"
    return True


def scenario_rank_monotonic():
    previous = 0
    for value in range(-20, 1200):
        index = RANK_ORDER.index(derive_rank_from_value(value))
        assert index >= previous, f"rank dropped at {value}"
        previous = index
    return True


def scenario_timeout_on_hanging_provider():
    provider = HangingProvider()
    started = time.monotonic()
    card = generate("mend", "support", provider, timeout_ms=50)
    elapsed = time.monotonic() - started
    assert elapsed < 1.0, f"timeout took {elapsed:.2f}s"
    assert card == basic_support_fallback("mend")
    assert provider.cancelled, "hanging call should be cancelled when the timer fires"
    return True


def scenario_late_support_reply_is_dropped():
    provider = LateProvider({"supportType": "buff", "name": "Late Boon", "finalValue": 1}, linger=2.0)
    generator = CardGenerator(provider=provider, timeout_ms=100)
    started = time.monotonic()
    card = generator.draw("mend", "support")
    elapsed = time.monotonic() - started
    assert elapsed < 1.0, f"resolved after {elapsed:.2f}s with a 100 ms deadline"
    assert card == basic_support_fallback("mend"), f"late reply leaked into the card: {card.name}"
    for _ in range(50):
        if provider.cancelled:
            break
        time.sleep(0.02)
    assert provider.cancelled
    return True


def scenario_late_attack_reply_is_dropped():
    generator = CardGenerator(LateProvider({"name": "Late Nuke", "finalValue": 999}, linger=0.3), timeout_ms=50)
    started = time.monotonic()
    card = generator("flame", "attack")
    assert time.monotonic() - started < 0.3
    assert card.name == "Flame Strike" and card == attack_fallback("flame")
    return True


def scenario_attack_timeout_uses_caller_fallback():
    mine = attack_fallback("backup")
    card = generate("flame", "attack", HangingProvider(), fallback=mine, timeout_ms=30)
    assert card is mine
    return True


def scenario_attack_timeout_without_fallback_uses_word_card():
    card = generate("flame", "attack", HangingProvider(), timeout_ms=30)
    assert card.name == "Flame Strike"
    assert card.card_type == "fire" and card.special_effect == "burn"
    assert card.role == "attack" and card.is_fallback
    assert card == attack_fallback("flame"), "word fallback should be repeatable"
    return True


def scenario_transport_failure_is_absorbed():
    card = generate("mend", "support", RaisingProvider(ConnectionError("connection reset")))
    assert card == basic_support_fallback("mend")

    card = generate("stone", "attack", RaisingProvider(RuntimeError("boom")))
    assert card == attack_fallback("stone")
    return True


def scenario_attack_shaped_support_replaced():
    raw = {"name": "Big Slash", "role": "attack", "type": "slash", "finalValue": 80, "baseValue": 80}
    assert not is_support_like(raw)
    card = generate("slash", "support", StaticProvider(raw))
    assert card == basic_support_fallback("slash"), "attack-shaped result must be replaced, not patched"
    assert card.name == "Healing Light" and card.final_value == 30
    return True


def scenario_partial_support_repaired():
    raw = {"name": "Iron Will", "type": "Buff", "finalValue": "lots", "specialEffect": "Guard Up"}
    card = generate("iron", "support", StaticProvider(raw))
    assert_support_invariants(card)
    assert card.support_type == "buff"
    assert card.card_type == "buff"
    assert card.final_value == 30 and card.base_value == 30
    assert card.effect_name == "Guard Up"
    assert card.name == "Iron Will"
    assert not card.is_fallback
    return True


def scenario_heal_without_message_gets_heal_logic():
    card = generate("herb", "support", StaticProvider({"supportType": "HEAL", "finalValue": 45}))
    assert_support_invariants(card)
    assert card.support_type == "heal" and card.card_type == "heal"
    assert card.support_message
    assert card.logic.action_type == "heal" and card.logic.value == 30 and card.logic.target == "player"
    assert card.final_value == 45 and card.base_value == 45
    assert card.effect_name == "Support Effect"
    return True


def scenario_support_invariants_hold_for_odd_shapes():
    shapes = [
        {"role": "support"},
        {"role": "SUPPORT", "finalValue": float("inf")},
        {"cardType": "enchant", "baseValue": 70},
        {"supportType": "Buff", "type": "", "finalValue": None},
        {"type": "heal", "finalValue": 12, "baseValue": "??", "logic": "not a dict"},
    ]
    for raw in shapes:
        card = generate("aid", "support", StaticProvider(raw))
        assert_support_invariants(card)
    enchant = generate("aid", "support", StaticProvider({"cardType": "enchant", "baseValue": 70}))
    assert enchant.rank == "B", "rank follows baseValue"
    return True


def scenario_attack_result_passes_through():
    raw = {"name": "Inferno", "type": "fire", "finalValue": 42, "baseValue": 90, "hitRate": 75, "specialEffect": "Burn"}
    card = generate("inferno", "attack", StaticProvider(raw))
    assert card.name == "Inferno" and card.role == "attack"
    assert card.final_value == 42 and card.rank == "A" and card.hit_rate == 75
    assert card.special_effect == "burn"
    assert card.logic.target == "opponent" and card.logic.action_type == "damage"
    return True


def scenario_attack_slot_keeps_attack_role():
    raw = {"name": "Sneaky", "role": "support", "effect": "support", "finalValue": 40}
    card = generate("sneak", "attack", StaticProvider(raw))
    assert card.role == "attack" and card.card_type == "normal"
    assert card.logic.target == "opponent" and card.logic.action_type == "damage"
    assert card.hit_rate == 90
    return True


def scenario_heal_card_logic_is_replaced():
    raw = {"supportType": "heal", "finalValue": 20, "logic": {"actionType": "damage", "target": "opponent", "value": 99}}
    card = generate("salve", "support", StaticProvider(raw))
    assert_support_invariants(card)
    assert card.logic.action_type == "heal" and card.logic.target == "player" and card.logic.value == 30
    return True


def scenario_non_text_word_still_gets_a_card():
    card = generate(5, "attack", None)
    assert card == attack_fallback("5")
    assert generate(None, "support", None) == basic_support_fallback("")
    return True


def scenario_attack_without_final_value_falls_back():
    card = generate("gust", "attack", StaticProvider({"name": "Gust", "type": "wind"}))
    assert card == attack_fallback("gust")

    card = generate("gust", "attack", StaticProvider(["not", "a", "card"]))
    assert card == attack_fallback("gust")
    return True


def scenario_no_provider_degrades_to_fallback():
    generator = CardGenerator(provider=None, timeout_ms=100)
    assert generator.draw("rest", "support") == basic_support_fallback("rest")
    assert generator("thunder", "attack") == attack_fallback("thunder")

    no_key = AnthropicCardProvider(api_key="", model="any")
    try:
        asyncio.run(no_key.generate("rest", "support"))
    except GenerationTransportFailure:
        pass
    else:
        raise AssertionError("provider without credentials should fail fast")
    assert generate("rest", "support", no_key) == basic_support_fallback("rest")
    return True


def scenario_basic_support_fallback_is_deterministic():
    a = basic_support_fallback("")
    b = basic_support_fallback(None)
    assert a == b
    assert a.word == "support" and a.rank == "E"
    assert a.role == "support" and a.card_type == "heal" and a.support_type == "heal"
    assert a.logic.target == "player" and a.logic.action_type == "heal"
    assert a.logic.value == 30 and a.logic.duration == 0
    assert a.base_value == a.final_value == 30
    assert a.hit_rate == 100 and a.cost == 0
    return True


def scenario_word_fallback_classification():
    assert attack_fallback("glacier ice").card_type == "water"
    assert attack_fallback("shock").special_effect == "paralyze"
    assert attack_fallback("strength").card_type == "physical"
    assert attack_fallback("aeiou").card_type == "magic"
    assert classify_word("heal") == ("heal", "heal")
    assert classify_word("Restore") == ("heal", "heal")
    assert classify_word("cure-all") == ("heal", "heal")
    assert attack_fallback("healing").special_effect == "heal"
    for word in ("a", "flame", "supercalifragilistic"):
        card = attack_fallback(word)
        assert 0 < card.final_value <= 100
        assert card.rank == derive_rank_from_value(card.base_value)
    return True


def scenario_parse_card_json_from_chatter():
    text = 'Sure! Here is your card:\n```json\n{"name": "Tide", "finalValue": 20}\n```\nEnjoy.'
    assert parse_card_json(text) == {"name": "Tide", "finalValue": 20}
    assert parse_card_json('noise {"a": {"b": "}"}} tail') == {"a": {"b": "}"}}
    assert parse_card_json("no json here") is None
    assert parse_card_json("") is None
    return True


SCENARIOS = [
    scenario_rank_boundaries,
    scenario_rank_total_on_bad_input,
    scenario_rank_monotonic,
    scenario_timeout_on_hanging_provider,
    scenario_late_support_reply_is_dropped,
    scenario_late_attack_reply_is_dropped,
    scenario_attack_timeout_uses_caller_fallback,
    scenario_attack_timeout_without_fallback_uses_word_card,
    scenario_transport_failure_is_absorbed,
    scenario_attack_shaped_support_replaced,
    scenario_partial_support_repaired,
    scenario_heal_without_message_gets_heal_logic,
    scenario_support_invariants_hold_for_odd_shapes,
    scenario_attack_result_passes_through,
    scenario_attack_slot_keeps_attack_role,
    scenario_heal_card_logic_is_replaced,
    scenario_non_text_word_still_gets_a_card,
    scenario_attack_without_final_value_falls_back,
    scenario_no_provider_degrades_to_fallback,
    scenario_basic_support_fallback_is_deterministic,
    scenario_word_fallback_classification,
    scenario_parse_card_json_from_chatter,
]


def run_all() -> List[Tuple[str, bool, str]]:
    results: List[Tuple[str, bool, str]] = []
    for scenario in SCENARIOS:
        try:
            scenario()
            results.append((scenario.__name__, True, ""))
        except AssertionError as exc:
            results.append((scenario.__name__, False, str(exc)))
    return results
