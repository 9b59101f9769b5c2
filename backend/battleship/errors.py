"""Error kinds raised by the match engine and reported back to clients.

Every error here is recoverable: the router turns it into an ``error``
envelope for the offending connection and leaves room state untouched.
"""


class MatchError(Exception):
    """Base class for rejected requests."""

    default_message = 'Request rejected'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class RoomNotFound(MatchError):
    default_message = 'Room not found'


class RoomFull(MatchError):
    default_message = 'Room is full (maximum 2 players)'


class InvalidState(MatchError):
    default_message = 'Action not allowed right now'


class CellAlreadyAttacked(InvalidState):
    default_message = 'Cell was already attacked'


class NotYourTurn(MatchError):
    default_message = 'Not your turn'


class OutOfBounds(MatchError):
    default_message = 'Coordinates are outside the board'


class MalformedMessage(MatchError):
    default_message = 'Malformed message'
