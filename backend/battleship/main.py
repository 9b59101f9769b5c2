from flask import Blueprint, current_app, jsonify
from battleship.errors import RoomNotFound

main = Blueprint('main', __name__)


def _registry():
    return current_app.extensions['battleship'].registry


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the battleship room server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'rooms': len(_registry())})


@main.route('/api/rooms/<string:code>')
def get_room(code):
    """
    Returns a summary of a live room. Boards are never included.
    """
    try:
        room = _registry().find(code)
    except RoomNotFound as exc:
        return jsonify({'error': exc.message}), 404
    with room.lock:
        return jsonify(room.to_dict())
