from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    if allowed_origins == ['*']:
        allowed_origins = '*'
    CORS(flask_app, origins=allowed_origins, send_wildcard=allowed_origins == '*')

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry per app; liveness is answered by the Socket.IO manager
    from tictactoe.services.games import SessionRegistry
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')

    def is_connection_live(sid):
        return socketio.server.manager.is_connected(sid, namespace)

    flask_app.extensions['session_registry'] = SessionRegistry(is_connection_live=is_connection_live)

    # Import and register blueprints here
    from tictactoe.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from tictactoe.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    return flask_app
