# wordclash/state.py
import threading
import time
import uuid
from typing import Dict, List, Optional

from .engine import resolver
from .engine.models import Player, Room
from .errors import AlreadyInRoom, MatchError, RoomExists, RoomFull, RoomNotFound
from .log import get_logger

logger = get_logger(__name__)


def new_seed() -> int:
    return int(time.time() * 1000) & 0xFFFFFFFF


class Matchmaker:
    """
    Owns every waiting player, room and password reservation for one server.
    One instance is created at startup and handed to the socket handlers.
    """

    def __init__(self, seed_fn=new_seed):
        self.queue: List[str] = []
        self.players: Dict[str, Player] = {}
        self.rooms: Dict[str, Room] = {}
        self.password_rooms: Dict[str, str] = {}
        self.sid_to_room: Dict[str, str] = {}
        self.seed_fn = seed_fn
        self._lock = threading.RLock()

    # players

    def connect(self, sid: str, name: Optional[str] = None) -> Player:
        with self._lock:
            player = self.players.get(sid)
            if player is None:
                player = Player(sid=sid)
                self.players[sid] = player
            if name and str(name).strip():
                player.name = str(name).strip()[:32]
            return player

    def get_player(self, sid: str) -> Optional[Player]:
        return self.players.get(sid)

    def get_room_by_sid(self, sid: str) -> Optional[Room]:
        room_id = self.sid_to_room.get(sid)
        if not room_id:
            return None
        return self.rooms.get(room_id)

    # FIFO queue

    def enqueue(self, player: Player) -> None:
        with self._lock:
            if player.sid in self.sid_to_room:
                raise AlreadyInRoom("Already in a room.")
            if player.sid not in self.queue:
                self.queue.append(player.sid)

    def dequeue(self, sid: str) -> None:
        with self._lock:
            if sid in self.queue:
                self.queue.remove(sid)

    def try_pair(self) -> Optional[Room]:
        """Pair the two longest-waiting players. The first in line moves first."""
        with self._lock:
            if len(self.queue) < 2:
                return None
            p1 = self.players[self.queue.pop(0)]
            p2 = self.players[self.queue.pop(0)]
            room = self._create_room([p1, p2])
            resolver.start_room(room, self.seed_fn())
            return room

    def _create_room(self, players: List[Player], password: Optional[str] = None) -> Room:
        room = Room(room_id=f"room-{uuid.uuid4().hex[:8]}", players=list(players), password=password)
        self.rooms[room.room_id] = room
        for p in players:
            self.sid_to_room[p.sid] = room.room_id
            p.room_id = room.room_id
        return room

    # password rooms

    def create_password_room(self, player: Player, password: str) -> Room:
        password = (password or "").strip()
        if not password:
            raise MatchError("A password is required.")
        with self._lock:
            if player.sid in self.sid_to_room:
                raise AlreadyInRoom("Already in a room.")
            if password in self.password_rooms:
                raise RoomExists("That password is already taken.")
            self.dequeue(player.sid)
            room = self._create_room([player], password=password)
            self.password_rooms[password] = room.room_id
            logger.info("Password room %s opened by %s", room.room_id, player.sid)
            return room

    def join_password_room(self, player: Player, password: str) -> Room:
        password = (password or "").strip()
        with self._lock:
            if player.sid in self.sid_to_room:
                raise AlreadyInRoom("Already in a room.")
            room = self.rooms.get(self.password_rooms.get(password, ""))
            if room is None:
                raise RoomNotFound("No room uses that password.")
            if room.is_full:
                raise RoomFull("That room is full.")
            self.dequeue(player.sid)
            room.players.append(player)
            self.sid_to_room[player.sid] = room.room_id
            player.room_id = room.room_id
            resolver.start_room(room, self.seed_fn())
            return room

    # leaving

    def remove_player(self, player: Player) -> None:
        """Drop a player from the queue or from a password room nobody has joined yet."""
        with self._lock:
            self.dequeue(player.sid)
            room = self.get_room_by_sid(player.sid)
            if room and room.phase == "waiting":
                self.cleanup_room(room.room_id)

    def disconnect(self, sid: str) -> Optional[Room]:
        """
        Forget a connection. Returns the room it forfeited, if a battle was running,
        so the caller can tell the remaining player.
        """
        with self._lock:
            player = self.players.pop(sid, None)
            if player is None:
                return None
            self.remove_player(player)
            room = self.get_room_by_sid(sid)
        if room is None:
            return None
        # the room lock may be held by a turn waiting on a card
        winner = resolver.forfeit(room, sid)
        self.cleanup_room(room.room_id)
        return room if winner else None

    def cleanup_room(self, room_id: str) -> None:
        with self._lock:
            room = self.rooms.pop(room_id, None)
            if not room:
                return
            if room.password and self.password_rooms.get(room.password) == room_id:
                del self.password_rooms[room.password]
            for p in room.players:
                self.sid_to_room.pop(p.sid, None)
                p.room_id = None
