import os
import sys
import pytest

# Ensure the backend root (containing the `battleship` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from battleship import create_app, socketio
from battleship.board import Board

NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    BOARD_SIZE = 10
    ROOM_CODE_LENGTH = 6
    SOCKETIO_NAMESPACE = NAMESPACE
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'


def marker_grid(ships=(), size=10):
    """Wire-format board with ship markers at the given (row, col) cells."""
    grid = [['~'] * size for _ in range(size)]
    for row, col in ships:
        grid[row][col] = 'N'
    return grid


def board_with(ships=(), size=10):
    return Board.from_markers(marker_grid(ships, size), size)


def envelopes(test_client, kind=None):
    """Drain received envelopes, optionally keeping only one kind."""
    out = []
    for pkt in test_client.get_received(NAMESPACE):
        if pkt['name'] != 'envelope':
            continue
        payload = pkt['args'][0]
        if kind is None or payload['type'] == kind:
            out.append(payload)
    return out


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['battleship'].registry


@pytest.fixture()
def make_sio_client(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()
