# wordclash/errors.py
"""Error kinds raised by the matchmaker, the battle engine and the card pipeline.

Generation errors never leave ``wordclash.cards.generator``; the rest surface to
the originating connection as an ``action_error`` event carrying ``kind``.
"""


class WordClashError(Exception):
    kind = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class GenerationError(WordClashError):
    kind = "generation_error"


class GenerationTimeout(GenerationError):
    kind = "generation_timeout"


class GenerationShapeInvalid(GenerationError):
    kind = "generation_shape_invalid"


class GenerationTransportFailure(GenerationError):
    kind = "generation_transport_failure"


class MatchError(WordClashError):
    kind = "match_error"


class RoomNotFound(MatchError):
    kind = "room_not_found"


class RoomFull(MatchError):
    kind = "room_full"


class RoomExists(MatchError):
    kind = "room_exists"


class AlreadyInRoom(MatchError):
    kind = "already_in_room"


class TurnError(WordClashError):
    kind = "turn_error"


class PlayerDisconnected(WordClashError):
    kind = "player_disconnected"
