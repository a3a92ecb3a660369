import time
from datetime import timedelta
from threading import Thread

import redis
from flask import Flask, jsonify
from flask_cors import CORS
from flask_session import Session
from flask_socketio import SocketIO

from .config import Config
from .models.database import db
from .services.change_feed import ChangeFeed
from .services.match_service import MatchService
from .services.store import DocumentStore
from .utils.logger import setup_logger

socketio = SocketIO()
change_feed = ChangeFeed(socketio)


def cleanup_thread(app, service):
    """Background thread to delete rooms nobody plays in anymore."""
    logger = setup_logger()
    max_age = timedelta(minutes=app.config['STALE_ROOM_MINUTES'])
    while True:
        with app.app_context():
            try:
                removed = service.cleanup_stale_rooms(max_age)
                if removed:
                    logger.info(f"Removed {removed} stale rooms")
            except Exception:
                logger.exception("Error cleaning up stale rooms")
        time.sleep(app.config['CLEANUP_INTERVAL'])


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    logger = setup_logger(app.config.get('LOG_FILE'))

    # Server-side sessions in Redis; tests fall back to signed cookies
    if app.config.get('SESSION_TYPE') == 'redis':
        app.config['SESSION_REDIS'] = redis.from_url(app.config['REDIS_URL'])
        app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=1)
        Session(app)

    CORS(app, resources={r"/*": {"origins": app.config['CORS_ALLOWED_ORIGINS']}})

    db.init_app(app)
    with app.app_context():
        db.create_all()

    socketio.init_app(
        app,
        async_mode=app.config.get('SOCKETIO_ASYNC_MODE'),
        cors_allowed_origins=app.config['CORS_ALLOWED_ORIGINS'],
        ping_timeout=60,
        ping_interval=25,
        manage_session=False  # Let Flask manage the sessions
    )

    service = MatchService(
        store=DocumentStore(),
        feed=change_feed,
        max_write_retries=app.config['MAX_WRITE_RETRIES'],
        room_id_length=app.config['ROOM_ID_LENGTH'],
        room_id_attempts=app.config['ROOM_ID_ATTEMPTS']
    )
    app.extensions['match_service'] = service

    from .routes.match import match_bp, register_socket_events
    app.register_blueprint(match_bp)
    register_socket_events(socketio)

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    if app.config.get('ENABLE_CLEANUP_THREAD'):
        Thread(target=cleanup_thread, args=(app, service), daemon=True).start()

    logger.info("SpherePlay app created")
    return app
