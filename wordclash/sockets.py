# wordclash/sockets.py
from flask import request
from flask_socketio import emit, join_room, close_room

from .engine import resolver
from .errors import PlayerDisconnected, TurnError, WordClashError
from .log import get_logger

logger = get_logger(__name__)


def snapshot_for(room, viewer_sid):
    """
    Returns a UI-friendly snapshot with your/opponent HP, stamina and magic.
    """
    you = room.seat_of(viewer_sid)
    enemy = room.opponent_of(viewer_sid)

    def pack(ps):
        if ps is None:
            return None
        return {
            "id": ps.sid,
            "name": ps.name,
            **ps.stats(),
            "effects": [
                {"name": e.get("name"), "stat": e.get("stat"), "delta": e.get("delta"), "duration": e.get("duration")}
                for e in ps.effects
            ],
        }

    return {
        "roomId": room.room_id,
        "phase": room.phase,
        "turn": room.turn,
        "you": pack(you),
        "opponent": pack(enemy),
        "yourTurn": room.turn_owner == viewer_sid,
        "log": room.log[-30:],
        "winner": room.winner,
        "log_length": len(room.log),
    }


def _payload_dict(payload):
    return payload if isinstance(payload, dict) else {}


def register_wordclash_socket_handlers(socketio, matchmaker, card_source):
    def fail(exc: WordClashError):
        emit("action_error", {"kind": exc.kind, "message": exc.message})

    def announce_room(room):
        for ps in room.players:
            join_room(room.room_id, sid=ps.sid)
        for ps in room.players:
            opponent = room.opponent_of(ps.sid)
            socketio.emit("room_matched", {
                "roomId": room.room_id,
                "opponentName": opponent.name,
                "opponentId": opponent.sid,
                "you": ps.stats(),
                "opponent": opponent.stats(),
                "yourTurn": room.turn_owner == ps.sid,
                "turnOwner": room.turn_owner,
            }, to=ps.sid)

    def end_battle(room):
        socketio.emit("battle_ended", {
            "roomId": room.room_id,
            "winnerId": room.winner,
            "reason": room.end_reason,
        }, to=room.room_id)
        close_room(room.room_id)
        matchmaker.cleanup_room(room.room_id)

    @socketio.on("connect")
    def wc_connect():
        player = matchmaker.connect(request.sid)
        emit("wc_connected", {"playerId": player.sid})

    @socketio.on("join_queue")
    def wc_join_queue(payload=None):
        player = matchmaker.connect(request.sid, _payload_dict(payload).get("name"))
        try:
            matchmaker.enqueue(player)
        except WordClashError as exc:
            fail(exc)
            return
        emit("wc_system", "Searching for opponent...")

        room = matchmaker.try_pair()
        if room:
            announce_room(room)

    @socketio.on("cancel_queue")
    def wc_cancel_queue():
        player = matchmaker.get_player(request.sid)
        if player:
            matchmaker.remove_player(player)
        emit("wc_system", "Search cancelled.")

    @socketio.on("create_password_room")
    def wc_create_password_room(payload=None):
        payload = _payload_dict(payload)
        player = matchmaker.connect(request.sid, payload.get("name"))
        try:
            room = matchmaker.create_password_room(player, str(payload.get("password", "")))
        except WordClashError as exc:
            fail(exc)
            return
        emit("wc_system", "Room created. Waiting for an opponent...")
        emit("room_created", {"roomId": room.room_id})

    @socketio.on("join_password_room")
    def wc_join_password_room(payload=None):
        payload = _payload_dict(payload)
        player = matchmaker.connect(request.sid, payload.get("name"))
        try:
            room = matchmaker.join_password_room(player, str(payload.get("password", "")))
        except WordClashError as exc:
            fail(exc)
            return
        announce_room(room)

    @socketio.on("submit_action")
    def wc_submit_action(payload=None):
        sid = request.sid
        payload = _payload_dict(payload)
        room = matchmaker.get_room_by_sid(sid)
        if not room:
            fail(TurnError("Not in a battle."))
            return
        try:
            result = resolver.submit_action(
                room, sid, str(payload.get("kind", "")), str(payload.get("word", "")), card_source
            )
        except TurnError as exc:
            fail(exc)
            return

        base = result.to_payload()
        base["card"] = result.card.to_payload()
        for ps in room.players:
            socketio.emit("turn_result", {**base, "snapshot": snapshot_for(room, ps.sid)}, to=ps.sid)
        if result.finished:
            end_battle(room)

    @socketio.on("disconnect")
    def wc_disconnect(reason=None):
        sid = request.sid
        room = matchmaker.disconnect(sid)
        if not room:
            return
        logger.info("Player %s left room %s, %s wins by forfeit", sid, room.room_id, room.winner)
        close_room(room.room_id)
        notice = PlayerDisconnected("Opponent disconnected. You win!")
        socketio.emit("battle_ended", {
            "roomId": room.room_id,
            "winnerId": room.winner,
            "reason": room.end_reason,
            "kind": notice.kind,
            "message": notice.message,
        }, to=room.winner)
