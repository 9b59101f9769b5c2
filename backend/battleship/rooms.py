import logging
import random
import string
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .board import Board
from .errors import RoomNotFound

logger = logging.getLogger(__name__)

MAX_PLAYERS = 2


class RoomState(Enum):
    WAITING = 'waiting'
    CONFIGURING = 'configuring'
    PLAYING = 'playing'
    FINISHED = 'finished'


@dataclass
class Player:
    sid: str
    name: str
    board: Optional[Board] = None

    @property
    def is_configured(self) -> bool:
        return self.board is not None


@dataclass
class Room:
    """One match: two fixed slots, their boards, the state and the turn pointer."""

    code: str
    slots: List[Optional[Player]] = field(default_factory=lambda: [None] * MAX_PLAYERS)
    state: RoomState = RoomState.WAITING
    turn_index: int = 0
    winner: Optional[str] = None
    closed: bool = False
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def players(self) -> List[Player]:
        return [p for p in self.slots if p is not None]

    @property
    def player_count(self) -> int:
        return len(self.players)

    def is_empty(self) -> bool:
        return self.player_count == 0

    def free_slot(self) -> Optional[int]:
        for index, player in enumerate(self.slots):
            if player is None:
                return index
        return None

    def opponent_index(self, index: int) -> int:
        return 1 - index

    def player(self, index: int) -> Optional[Player]:
        return self.slots[index]

    def to_dict(self):
        players = []
        for index, p in enumerate(self.slots):
            if p is None:
                continue
            players.append({
                'player_index': index,
                'name': p.name,
                'configured': p.is_configured,
            })
        return {
            'code': self.code,
            'state': self.state.value,
            'players': players,
            'turn_index': self.turn_index if self.state is RoomState.PLAYING else None,
            'winner': self.winner,
        }


def generate_room_code(length=6):
    """Generate a short, human-typeable room code."""
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


class RoomRegistry:
    """Owns the table of live rooms, keyed by code."""

    def __init__(self, code_length: int = 6):
        self.code_length = code_length
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._rooms)

    def create_room(self) -> str:
        with self._lock:
            code = generate_room_code(self.code_length)
            while code in self._rooms:
                code = generate_room_code(self.code_length)
            self._rooms[code] = Room(code=code)
        logger.info(f"[room-created] code={code}")
        return code

    def find(self, code) -> Room:
        if not isinstance(code, str):
            raise RoomNotFound()
        with self._lock:
            room = self._rooms.get(code.strip().upper())
        if room is None:
            raise RoomNotFound()
        return room

    def remove_if_empty(self, code: str) -> bool:
        """Delete the room if nobody is seated in it. Returns True when removed."""
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                return False
            with room.lock:
                if not room.is_empty():
                    return False
                room.closed = True
                del self._rooms[code]
        logger.info(f"[room-removed] code={code}")
        return True
