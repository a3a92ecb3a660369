import pytest
from sphereplay.app import create_app, socketio
from sphereplay.config import TestConfig
from sphereplay.models.database import db
from sphereplay.models.player import Profile
from sphereplay.services.change_feed import ChangeFeed
from sphereplay.services.game_service import GameService
from sphereplay.services.match_service import MatchService

HOST_ID = 'host-player'
GUEST_ID = 'guest-player'

@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def host_client(app):
    client = app.test_client()
    with client.session_transaction() as sess:
        sess['session_id'] = HOST_ID
    return client

@pytest.fixture
def guest_client(app):
    client = app.test_client()
    with client.session_transaction() as sess:
        sess['session_id'] = GUEST_ID
    return client

@pytest.fixture
def socket_client_for(app):
    clients = []

    def _connect(flask_client):
        client = socketio.test_client(app, flask_test_client=flask_client)
        clients.append(client)
        return client

    yield _connect
    for client in clients:
        if client.is_connected():
            client.disconnect()

@pytest.fixture
def feed():
    return ChangeFeed()

@pytest.fixture
def match_service(app, feed):
    return MatchService(feed=feed)

@pytest.fixture
def new_game():
    """A record for ``game_type`` with both players seated."""
    def _new_game(game_type, **config):
        record = GameService.new_match(game_type, HOST_ID, Profile('Alice', 'blue'), config)
        record.update(guest_id=GUEST_ID, guest_name='Bob', guest_color='red')
        return record
    return _new_game

@pytest.fixture
def play():
    """Apply moves in order, each by whichever role holds the turn."""
    def _play(engine, record, *moves):
        for move in moves:
            record = engine.apply_move(record, record['turn'], move)
        return record
    return _play
