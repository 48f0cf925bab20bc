# wordclash/content/balance.py
DEFAULTS = {
    "hp": 100,
    "stamina": 50,
    "magic": 50,
    "stamina_regen_per_turn": 5,
    "magic_regen_per_turn": 5,
    "support_heal": 30,
    "card_timeout_ms": 8000,
    "attack_hit_rate": 90,
    "crit_chance": 0.3,
    "crit_multiplier": 1.5,
    "burn_damage": 5,
    "burn_duration": 2,
}

# inclusive lower bounds, checked top-down
RANK_THRESHOLDS = [
    ("EX", 999),
    ("S", 96),
    ("A", 86),
    ("B", 61),
    ("C", 31),
    ("D", 11),
]

SUPPORT_TYPES = ("heal", "buff", "enchant")

STATS = ("hp", "stamina", "magic")
