from functools import partial

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, scheduler=None):
    """Build the Flask app, its room registry and the Socket.IO gateway.

    ``scheduler`` defaults to background tasks on the Socket.IO server;
    tests pass a manual clock instead.
    """
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    # every module logs under the package logger, which is Flask's app logger
    flask_app.logger.setLevel(str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper())

    origins = flask_app.config.get('CORS_ALLOWED_ORIGINS', '*')
    if origins != '*':
        origins = [o.strip() for o in origins.split(',') if o.strip()]
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from bingo.services.game.registry import RoomRegistry
    from bingo.services.game.room import Room, RoomSettings
    from bingo.services.game.timers import SocketIOScheduler
    from bingo.socketio_events import SessionGateway, publish_events, register_socketio_handlers

    settings = RoomSettings.from_config(flask_app.config)
    if scheduler is None:
        scheduler = SocketIOScheduler(socketio)
    registry = RoomRegistry(partial(Room, settings=settings, scheduler=scheduler, publish=publish_events))
    gateway = SessionGateway(registry)
    register_socketio_handlers(gateway)

    flask_app.extensions['bingo_registry'] = registry
    flask_app.extensions['bingo_gateway'] = gateway

    from bingo.main import main
    flask_app.register_blueprint(main)

    from bingo.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    status_interval = int(flask_app.config.get('STATUS_LOG_INTERVAL_SEC', 0))
    if status_interval > 0 and not flask_app.config.get('TESTING'):
        socketio.start_background_task(_status_worker, gateway, status_interval)

    flask_app.logger.info(
        f"[startup] min_players={settings.min_players} max_players={settings.max_players} "
        f"waiting={settings.waiting_duration}s draw_interval={settings.draw_interval}s"
    )
    return flask_app


def _status_worker(gateway, interval):
    while True:
        socketio.sleep(interval)
        gateway.log_status()
