# wordclash/engine/resolver.py
from typing import Callable, Dict, Optional

from ..content.balance import DEFAULTS
from ..errors import TurnError
from ..log import get_logger
from .dice import rng_for
from .effects import add_enchant, apply_burn, apply_stat, tick_effects
from .models import Card, Player, Room, TurnResult
from .rules import roll_hit

logger = get_logger(__name__)

CardSource = Callable[[str, str], Card]    # (word, role) -> Card

ACTION_ROLES = {"attack": "attack", "defend": "support"}


def start_room(room: Room, seed: int = 0) -> None:
    """Seat 0 takes the first turn."""
    for ps in room.players:
        ps.hp = DEFAULTS["hp"]
        ps.stamina = DEFAULTS["stamina"]
        ps.magic = DEFAULTS["magic"]
        ps.effects = []
        ps.room_id = room.room_id
    room.seed = seed
    room.phase = "active"
    room.turn = 0
    room.turn_owner = room.players[0].sid
    room.log.append(f"{room.players[0].name} vs {room.players[1].name}. {room.players[0].name} moves first.")
    logger.info("Room %s started: %s vs %s", room.room_id, room.players[0].sid, room.players[1].sid)


def finish_room(room: Room, winner: Optional[str], reason: str) -> bool:
    """Move the room to finished. Only the first call wins; later calls return False."""
    if room.phase == "finished":
        return False
    room.phase = "finished"
    room.winner = winner
    room.end_reason = reason
    room.turn_owner = None
    winner_ps = room.seat_of(winner) if winner else None
    if winner_ps:
        room.log.append(f"{winner_ps.name} wins ({reason}).")
    else:
        room.log.append(f"Battle over ({reason}).")
    logger.info("Room %s finished: winner=%s reason=%s", room.room_id, winner, reason)
    return True


def forfeit(room: Room, leaver_sid: str) -> Optional[str]:
    """The leaver loses. Returns the winner sid, or None if nobody was left to win."""
    with room.lock:
        if room.phase == "finished":
            return None
        opponent = room.opponent_of(leaver_sid) if room.phase == "active" else None
        winner = opponent.sid if opponent else None
        finish_room(room, winner, "forfeit" if winner else "abandoned")
        return winner


def _add_deltas(deltas: Dict[str, Dict[str, int]], sid: str, stat: str, amount: int) -> None:
    if not amount:
        return
    per_player = deltas.setdefault(sid, {})
    per_player[stat] = per_player.get(stat, 0) + amount


def _apply_card(actor: Player, defender: Player, role: str, card: Card, r, result: TurnResult) -> None:
    logic = card.logic
    if role == "support":
        amount = max(0, int(round(logic.value)))
        stat = "hp" if logic.action_type == "heal" else card.target_stat
        if logic.action_type == "enchant" and logic.duration > 0:
            add_enchant(actor, stat, amount, logic.duration, name=card.effect_name or card.name)
            result.log.append(f"{actor.name} is enchanted by {card.name}: +{amount} {stat} for {logic.duration} turns.")
            return
        gained = apply_stat(actor, stat, amount)
        _add_deltas(result.deltas, actor.sid, stat, gained)
        verb = "heals" if stat == "hp" else "gains"
        result.log.append(f"{actor.name} uses {card.name} [{card.rank}] and {verb} {gained} {stat}.")
        return

    amount = max(0, int(round(card.final_value)))
    if card.special_effect == "heal":
        # the strike is spent on the caster: half its power back as hp, nothing dealt
        gained = apply_stat(actor, "hp", amount // 2)
        _add_deltas(result.deltas, actor.sid, "hp", gained)
        result.log.append(f"{actor.name} uses {card.name} [{card.rank}] and recovers {gained} hp.")
        return

    crit = card.special_effect == "critical" and r.random() < DEFAULTS["crit_chance"]
    if crit:
        amount = int(amount * DEFAULTS["crit_multiplier"])
    dealt = apply_stat(defender, card.target_stat, -amount)
    _add_deltas(result.deltas, defender.sid, card.target_stat, dealt)
    line = f"{actor.name} uses {card.name} [{card.rank}] for {-dealt} {card.target_stat} damage."
    if crit:
        line = f"{line} Critical hit!"
    result.log.append(line)

    if card.special_effect == "burn" and defender.hp > 0:
        apply_burn(defender, DEFAULTS["burn_damage"], DEFAULTS["burn_duration"], source=card.name)
        result.log.append(f"{defender.name} is set ablaze.")


def submit_action(room: Room, sid: str, kind: str, word: str, draw_card: CardSource) -> TurnResult:
    """
    Resolve one action from the turn holder.
    Raises TurnError (state untouched) if the submitter may not act.
    """
    with room.lock:
        if room.phase != "active":
            raise TurnError("The battle is not active.")
        if sid != room.turn_owner:
            raise TurnError("Not your turn!")
        role = ACTION_ROLES.get(kind)
        if role is None:
            raise TurnError(f"Unknown action '{kind}'.")
        word = (word or "").strip()
        if not word:
            raise TurnError("A word is required.")

        actor = room.seat_of(sid)
        defender = room.opponent_of(sid)
        card = draw_card(word, role)

        r = rng_for(room.seed, room.turn)
        room.turn += 1
        result = TurnResult(room_id=room.room_id, actor_id=sid, card=card, hit=True, turn=room.turn)
        result.log.append(f"Turn {room.turn}")

        for ps in (actor, defender):
            for stat, amount in tick_effects(ps, result.log, ps.name).items():
                _add_deltas(result.deltas, ps.sid, stat, amount)

        if actor.hp > 0 and defender.hp > 0:
            pay_stat = "stamina" if role == "attack" else "magic"
            _add_deltas(result.deltas, sid, pay_stat, apply_stat(actor, pay_stat, -card.cost))

            if role == "attack":
                result.hit = roll_hit(card.hit_rate, r)
            if result.hit:
                _apply_card(actor, defender, role, card, r, result)
            else:
                result.log.append(f"{actor.name} uses {card.name} [{card.rank}]. Miss!")

            _add_deltas(result.deltas, sid, "stamina", apply_stat(actor, "stamina", DEFAULTS["stamina_regen_per_turn"]))
            _add_deltas(result.deltas, sid, "magic", apply_stat(actor, "magic", DEFAULTS["magic_regen_per_turn"]))

        room.log.extend(result.log)

        if defender.hp <= 0:
            finish_room(room, actor.sid, "knockout")
        elif actor.hp <= 0:
            finish_room(room, defender.sid, "knockout")
        else:
            room.turn_owner = defender.sid

        if room.phase == "finished":
            result.finished = True
            result.winner = room.winner
            result.log.append(room.log[-1])
        result.next_turn = room.turn_owner
        return result
