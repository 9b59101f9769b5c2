from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    # Domain modules log through children of this logger (battleship.rooms, ...)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from battleship.rooms import RoomRegistry
    from battleship.socketio_events import MatchServer, register_socketio_handlers
    registry = RoomRegistry(code_length=flask_app.config.get('ROOM_CODE_LENGTH', 6))
    flask_app.extensions['battleship'] = MatchServer(
        registry,
        board_size=flask_app.config.get('BOARD_SIZE', 10),
        namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'),
    )

    from battleship.main import main
    flask_app.register_blueprint(main)

    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'))

    return flask_app
