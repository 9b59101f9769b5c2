import logging
from typing import List, Tuple

from battleship.board import Board
from battleship.errors import InvalidState, RoomFull, RoomNotFound
from battleship.protocol import (
    BeginConfiguration,
    Delivery,
    JoinedRoom,
    MatchOver,
    MatchStarted,
    OpponentJoined,
    OpponentLeft,
    YourTurn,
)
from battleship.rooms import Player, Room, RoomState

logger = logging.getLogger(__name__)


def join(room: Room, sid: str, name: str) -> Tuple[int, List[Delivery]]:
    """Seat a connection in the lowest free slot.

    Returns the slot index and the deliveries. The second join moves the
    room from waiting to configuring and tells each player the other's name.
    """
    with room.lock:
        if room.closed:
            raise RoomNotFound()
        index = room.free_slot()
        if index is None:
            raise RoomFull()
        if room.state not in (RoomState.WAITING, RoomState.CONFIGURING):
            raise InvalidState('Match already in progress or finished')

        name = name or f'Player {index + 1}'
        room.slots[index] = Player(sid=sid, name=name)
        out = [Delivery(index, JoinedRoom(code=room.code, player_index=index, name=name))]
        opponent = room.player(room.opponent_index(index))
        if opponent is not None:
            out.append(Delivery(room.opponent_index(index), OpponentJoined(name=name, total_players=room.player_count)))
        logger.info(f"[join] room={room.code} slot={index} name={name!r} players={room.player_count}")

        if room.player_count == 2:
            room.state = RoomState.CONFIGURING
            for i in range(len(room.slots)):
                other = room.player(room.opponent_index(i))
                out.append(Delivery(i, BeginConfiguration(opponent_name=other.name)))
            logger.info(f"[configuring] room={room.code}")
        return index, out


def configure(room: Room, index: int, board: Board) -> List[Delivery]:
    """Store a player's board; start the match once both boards are in."""
    with room.lock:
        player = room.player(index)
        if player is None:
            raise InvalidState('You are not seated in this room')
        if room.state not in (RoomState.WAITING, RoomState.CONFIGURING):
            raise InvalidState('Boards can only be submitted before the match starts')
        player.board = board
        logger.info(f"[configure] room={room.code} slot={index} ships={board.remaining_ship_count()}")
        return _start_if_ready(room)


def _start_if_ready(room: Room) -> List[Delivery]:
    if room.state is not RoomState.CONFIGURING:
        return []
    if room.player_count < 2 or not all(p.is_configured for p in room.players):
        return []
    room.state = RoomState.PLAYING
    room.turn_index = 0
    first = room.player(0).name
    logger.info(f"[match-started] room={room.code} first={first!r}")
    return [
        Delivery(0, MatchStarted(first_turn_name=first)),
        Delivery(1, MatchStarted(first_turn_name=first)),
        Delivery(0, YourTurn()),
    ]


def leave(room: Room, index: int) -> Tuple[bool, List[Delivery]]:
    """Vacate a slot. Returns whether the room is now empty, plus deliveries.

    Leaving before the match starts sends the room back to waiting so a new
    opponent can take the seat. Leaving during a match forfeits it to the
    player who stayed.
    """
    with room.lock:
        player = room.player(index)
        if player is None:
            return room.is_empty(), []
        room.slots[index] = None
        out = []
        remaining = room.opponent_index(index)
        stayer = room.player(remaining)
        logger.info(f"[leave] room={room.code} slot={index} name={player.name!r} state={room.state.value}")

        if stayer is not None:
            out.append(Delivery(remaining, OpponentLeft(name=player.name)))
            if room.state is RoomState.CONFIGURING:
                room.state = RoomState.WAITING
            elif room.state is RoomState.PLAYING:
                room.state = RoomState.FINISHED
                room.winner = stayer.name
                out.append(Delivery(remaining, MatchOver(winner_name=stayer.name)))
                logger.info(f"[forfeit] room={room.code} winner={stayer.name!r}")
        return room.is_empty(), out
