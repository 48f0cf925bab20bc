# wordclash/engine/models.py
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any


@dataclass
class CardLogic:
    target: str = "opponent"               # "opponent" | "player"
    action_type: str = "damage"            # damage | heal | buff | enchant
    value: float = 0
    duration: int = 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "actionType": self.action_type,
            "value": self.value,
            "duration": self.duration,
        }


@dataclass
class Card:
    word: str
    name: str
    rank: str
    role: str                              # "attack" | "support"
    card_type: str                         # heal/buff/enchant or an attack type
    final_value: float
    base_value: float
    logic: CardLogic = field(default_factory=CardLogic)
    attribute: str = ""
    support_type: Optional[str] = None
    support_message: Optional[str] = None
    effect_name: str = ""
    special_effect: str = ""
    target_stat: str = "hp"
    hit_rate: int = 100
    cost: int = 0
    duration: int = 0
    description: str = ""
    is_fallback: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "name": self.name,
            "rank": self.rank,
            "attribute": self.attribute,
            "role": self.role,
            "effect": self.role,
            "type": self.card_type,
            "cardType": self.card_type,
            "supportType": self.support_type,
            "supportMessage": self.support_message,
            "effectName": self.effect_name,
            "specialEffect": self.special_effect,
            "targetStat": self.target_stat,
            "logic": self.logic.to_payload(),
            "baseValue": self.base_value,
            "finalValue": self.final_value,
            "hitRate": self.hit_rate,
            "cost": self.cost,
            "duration": self.duration,
            "description": self.description,
            "fallback": self.is_fallback,
        }

    def summary(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "rank": self.rank,
            "role": self.role,
            "type": self.card_type,
            "finalValue": self.final_value,
            "hitRate": self.hit_rate,
        }


@dataclass
class Player:
    sid: str
    name: str = "Challenger"
    hp: int = 0
    stamina: int = 0
    magic: int = 0
    effects: List[Dict[str, Any]] = field(default_factory=list)   # enchants / burns
    room_id: Optional[str] = None

    def stats(self) -> Dict[str, int]:
        return {"hp": self.hp, "stamina": self.stamina, "magic": self.magic}


@dataclass
class Room:
    room_id: str
    players: List[Player]                  # seat 0 acts first
    password: Optional[str] = None
    phase: str = "waiting"                 # "waiting" | "active" | "finished"
    turn: int = 0
    turn_owner: Optional[str] = None
    seed: int = 0                          # for deterministic hit rolls
    log: List[str] = field(default_factory=list)
    winner: Optional[str] = None
    end_reason: Optional[str] = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def seat_of(self, sid: str) -> Optional[Player]:
        for p in self.players:
            if p.sid == sid:
                return p
        return None

    def opponent_of(self, sid: str) -> Optional[Player]:
        for p in self.players:
            if p.sid != sid:
                return p
        return None

    @property
    def is_full(self) -> bool:
        return len(self.players) >= 2


@dataclass
class TurnResult:
    room_id: str
    actor_id: str
    card: Card
    hit: bool
    deltas: Dict[str, Dict[str, int]] = field(default_factory=dict)   # sid -> stat -> delta
    log: List[str] = field(default_factory=list)
    turn: int = 0
    next_turn: Optional[str] = None
    winner: Optional[str] = None
    finished: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return {
            "roomId": self.room_id,
            "actorId": self.actor_id,
            "card": self.card.summary(),
            "hit": self.hit,
            "deltas": self.deltas,
            "log": self.log,
            "turn": self.turn,
            "nextTurn": self.next_turn,
            "winner": self.winner,
            "finished": self.finished,
        }
