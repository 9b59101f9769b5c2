import logging
from typing import List

from battleship.board import Outcome
from battleship.errors import InvalidState, NotYourTurn
from battleship.protocol import Attacked, AttackResult, Delivery, MatchOver, YourTurn
from battleship.rooms import Room, RoomState

logger = logging.getLogger(__name__)


def attack(room: Room, index: int, row: int, col: int) -> List[Delivery]:
    """Resolve one attack by the player in ``index`` against the opponent's board.

    A hit keeps the turn with the attacker, a miss hands it over. Sinking
    the last ship cell finishes the match instead of announcing a turn.
    """
    with room.lock:
        if room.state is not RoomState.PLAYING:
            raise InvalidState('No match in progress')
        if index != room.turn_index:
            raise NotYourTurn()
        attacker = room.player(index)
        defender_index = room.opponent_index(index)
        defender = room.player(defender_index)

        outcome = defender.board.attack(row, col)
        remaining = defender.board.remaining_ship_count()
        logger.info(
            f"[attack] room={room.code} slot={index} row={row} col={col} "
            f"outcome={outcome.value} remaining={remaining}"
        )
        out = [
            Delivery(index, AttackResult(row=row, col=col, outcome=outcome.value)),
            Delivery(defender_index, Attacked(row=row, col=col, outcome=outcome.value)),
        ]

        if remaining == 0:
            room.state = RoomState.FINISHED
            room.winner = attacker.name
            out.append(Delivery(index, MatchOver(winner_name=attacker.name)))
            out.append(Delivery(defender_index, MatchOver(winner_name=attacker.name)))
            logger.info(f"[match-over] room={room.code} winner={attacker.name!r}")
        elif outcome is Outcome.MISS:
            room.turn_index = defender_index
            out.append(Delivery(defender_index, YourTurn()))
        else:
            out.append(Delivery(index, YourTurn()))
        return out
