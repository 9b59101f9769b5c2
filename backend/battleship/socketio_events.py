import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from flask import current_app, request
from flask_socketio import emit

from battleship import socketio
from battleship.board import Board
from battleship.errors import InvalidState, MatchError, RoomNotFound
from battleship.protocol import (
    Attack,
    CreateRoom,
    Delivery,
    Error,
    JoinRoom,
    LeaveRoom,
    OutboundMessage,
    RoomCreated,
    SubmitBoard,
    parse_envelope,
)
from battleship.rooms import Room, RoomRegistry
from battleship.services import match

# All envelopes travel over this single Socket.IO event in both directions
ENVELOPE_EVENT = 'envelope'


@dataclass
class Session:
    """Per-connection context: which room and slot a socket is seated in."""

    sid: str
    room_code: Optional[str] = None
    player_index: Optional[int] = None
    name: Optional[str] = None

    @property
    def seated(self) -> bool:
        return self.room_code is not None

    def clear(self) -> None:
        self.room_code = None
        self.player_index = None
        self.name = None


class MatchServer:
    """Registry plus the session table for every connected socket."""

    def __init__(self, registry: RoomRegistry, board_size: int = 10, namespace: str = '/ws'):
        self.registry = registry
        self.board_size = board_size
        self.namespace = namespace
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def open_session(self, sid: str) -> Session:
        with self._lock:
            return self._sessions.setdefault(sid, Session(sid=sid))

    def session(self, sid: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(sid)

    def seat(self, session: Session, code: str, index: int, name: str) -> bool:
        """Record a seat on a still-connected session.

        Returns False when the socket disconnected in the meantime; the
        session is then left unseated and the caller must undo the join.
        """
        with self._lock:
            if self._sessions.get(session.sid) is not session:
                return False
            session.room_code = code
            session.player_index = index
            session.name = name
            return True

    def drop_session(self, sid: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.pop(sid, None)

    def deliver(self, room: Room, deliveries: List[Delivery]) -> None:
        """Send each delivery to the socket seated in its slot.

        Callers hold ``room.lock`` so messages leave in mutation order. A slot
        that has been vacated, or a socket that has gone away, is skipped.
        """
        for delivery in deliveries:
            player = room.player(delivery.player_index)
            if player is None:
                continue
            socketio.emit(ENVELOPE_EVENT, delivery.message.to_dict(), to=player.sid, namespace=self.namespace)


def _server() -> MatchServer:
    return current_app.extensions['battleship']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _reply(message: OutboundMessage) -> None:
    emit(ENVELOPE_EVENT, message.to_dict())


def handle_connect(auth=None):
    _server().open_session(_get_sid())
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    server = _server()
    session = server.drop_session(sid)
    current_app.logger.info(f"[disconnect] sid={sid}")
    if session and session.seated:
        _vacate(server, session)


def handle_envelope(data):
    sid = _get_sid()
    server = _server()
    session = server.session(sid)
    if session is None:
        current_app.logger.info(f"[dropped] sid={sid} envelope from a closed connection")
        return
    try:
        message = parse_envelope(data)
        _HANDLERS[type(message)](server, session, message)
    except MatchError as exc:
        current_app.logger.info(f"[rejected] sid={sid} error={type(exc).__name__} message={exc.message!r}")
        _reply(Error(message=exc.message))
    except Exception:
        current_app.logger.exception(f"[error] sid={sid} unhandled failure processing envelope")
        _reply(Error(message='Server error'))


# ---- inbound handlers ----

def _on_create_room(server: MatchServer, session: Session, message: CreateRoom) -> None:
    code = server.registry.create_room()
    _reply(RoomCreated(code=code))


def _on_join_room(server: MatchServer, session: Session, message: JoinRoom) -> None:
    if session.seated:
        raise InvalidState(f'Already in room {session.room_code}')
    room = server.registry.find(message.code)
    with room.lock:
        index, deliveries = match.join(room, session.sid, message.name)
        seated = server.seat(session, room.code, index, room.player(index).name)
        if seated:
            server.deliver(room, deliveries)
        else:
            # Disconnected while joining: nobody is left to vacate the slot later
            empty, _ = match.leave(room, index)
    if not seated:
        current_app.logger.info(f"[join-undone] room={room.code} sid={session.sid}")
        if empty:
            server.registry.remove_if_empty(room.code)


def _on_submit_board(server: MatchServer, session: Session, message: SubmitBoard) -> None:
    room = _seated_room(server, session)
    board = Board.from_markers(message.board, server.board_size)
    with room.lock:
        server.deliver(room, match.configure(room, session.player_index, board))


def _on_attack(server: MatchServer, session: Session, message: Attack) -> None:
    room = _seated_room(server, session)
    with room.lock:
        server.deliver(room, match.attack(room, session.player_index, message.row, message.col))


def _on_leave_room(server: MatchServer, session: Session, message: LeaveRoom) -> None:
    if not session.seated:
        raise InvalidState('You are not in a room')
    _vacate(server, session)


_HANDLERS = {
    CreateRoom: _on_create_room,
    JoinRoom: _on_join_room,
    SubmitBoard: _on_submit_board,
    Attack: _on_attack,
    LeaveRoom: _on_leave_room,
}


def _seated_room(server: MatchServer, session: Session) -> Room:
    if not session.seated:
        raise InvalidState('Join a room first')
    return server.registry.find(session.room_code)


def _vacate(server: MatchServer, session: Session) -> None:
    code, index = session.room_code, session.player_index
    session.clear()
    try:
        room = server.registry.find(code)
    except RoomNotFound:
        return
    with room.lock:
        empty, deliveries = match.leave(room, index)
        server.deliver(room, deliveries)
    # Registry lock is taken before the room lock, so removal happens outside it
    if empty:
        server.registry.remove_if_empty(code)


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the match namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(ENVELOPE_EVENT, handle_envelope, namespace=namespace)
