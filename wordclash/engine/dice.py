# wordclash/engine/dice.py
import random


def rng_for(seed: int, turn: int) -> random.Random:
    # deterministic per room seed + turn
    return random.Random(f"{seed}:{turn}")


def rng_for_word(word: str) -> random.Random:
    return random.Random(f"word:{word.lower()}")


def roll(dice: str, r: random.Random) -> int:
    # supports "d6", "d20", "d100" etc.
    if not dice.startswith("d"):
        raise ValueError("dice must be like 'd20'")
    sides = int(dice[1:])
    return r.randint(1, sides)
