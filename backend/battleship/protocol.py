"""Envelopes exchanged with clients.

Every envelope is a JSON object whose ``type`` key names its kind. Inbound
envelopes are decoded into one of the frozen dataclasses below; outbound
ones are built by the match engine and flattened with ``to_dict``.
"""
import json
from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Dict, List, Union

from .errors import MalformedMessage


# ---- inbound ----

@dataclass(frozen=True)
class CreateRoom:
    type: ClassVar[str] = 'create_room'


@dataclass(frozen=True)
class JoinRoom:
    type: ClassVar[str] = 'join_room'
    code: str
    name: str = ''


@dataclass(frozen=True)
class SubmitBoard:
    type: ClassVar[str] = 'submit_board'
    board: List[List[Any]]


@dataclass(frozen=True)
class Attack:
    type: ClassVar[str] = 'attack'
    row: int
    col: int


@dataclass(frozen=True)
class LeaveRoom:
    type: ClassVar[str] = 'leave_room'


InboundMessage = Union[CreateRoom, JoinRoom, SubmitBoard, Attack, LeaveRoom]
INBOUND_TYPES = (CreateRoom, JoinRoom, SubmitBoard, Attack, LeaveRoom)


def _require(data: Dict[str, Any], key: str, kind):
    value = data.get(key)
    # bool is an int subclass; coordinates must be real integers
    if value is None or isinstance(value, bool) or not isinstance(value, kind):
        raise MalformedMessage(f"'{key}' is missing or invalid")
    return value


def _parse_join(data):
    name = data.get('name') or ''
    if not isinstance(name, str):
        raise MalformedMessage("'name' must be a string")
    return JoinRoom(code=_require(data, 'code', str), name=name.strip())


_PARSERS = {
    CreateRoom.type: lambda data: CreateRoom(),
    JoinRoom.type: _parse_join,
    SubmitBoard.type: lambda data: SubmitBoard(board=_require(data, 'board', list)),
    Attack.type: lambda data: Attack(row=_require(data, 'row', int), col=_require(data, 'col', int)),
    LeaveRoom.type: lambda data: LeaveRoom(),
}


def parse_envelope(payload) -> InboundMessage:
    """Decode an inbound payload (dict or JSON text) into a typed message."""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError:
            raise MalformedMessage('Envelope is not valid JSON')
    if not isinstance(payload, dict):
        raise MalformedMessage('Envelope must be an object')
    parser = _PARSERS.get(payload.get('type'))
    if parser is None:
        raise MalformedMessage(f"Unknown message type: {payload.get('type')!r}")
    return parser(payload)


# ---- outbound ----

class OutboundMessage:
    type: ClassVar[str]

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, **asdict(self)}


@dataclass(frozen=True)
class RoomCreated(OutboundMessage):
    type: ClassVar[str] = 'room_created'
    code: str


@dataclass(frozen=True)
class JoinedRoom(OutboundMessage):
    type: ClassVar[str] = 'joined_room'
    code: str
    player_index: int
    name: str


@dataclass(frozen=True)
class OpponentJoined(OutboundMessage):
    type: ClassVar[str] = 'opponent_joined'
    name: str
    total_players: int


@dataclass(frozen=True)
class BeginConfiguration(OutboundMessage):
    type: ClassVar[str] = 'begin_configuration'
    opponent_name: str


@dataclass(frozen=True)
class MatchStarted(OutboundMessage):
    type: ClassVar[str] = 'match_started'
    first_turn_name: str


@dataclass(frozen=True)
class YourTurn(OutboundMessage):
    type: ClassVar[str] = 'your_turn'


@dataclass(frozen=True)
class AttackResult(OutboundMessage):
    type: ClassVar[str] = 'attack_result'
    row: int
    col: int
    outcome: str


@dataclass(frozen=True)
class Attacked(OutboundMessage):
    type: ClassVar[str] = 'attacked'
    row: int
    col: int
    outcome: str


@dataclass(frozen=True)
class MatchOver(OutboundMessage):
    type: ClassVar[str] = 'match_over'
    winner_name: str


@dataclass(frozen=True)
class OpponentLeft(OutboundMessage):
    type: ClassVar[str] = 'opponent_left'
    name: str


@dataclass(frozen=True)
class Error(OutboundMessage):
    type: ClassVar[str] = 'error'
    message: str


@dataclass(frozen=True)
class Delivery:
    """An outbound message addressed to a slot of the room it came from."""

    player_index: int
    message: OutboundMessage
