import logging
import secrets

from flask import Blueprint, current_app, jsonify, request, session
from flask_socketio import emit, join_room, leave_room

from ..errors import (ColorConflict, InvalidGameConfig, RoomFull, RoomNotFound,
                      SpherePlayError, StoreError)
from ..models.match import normalize_room_id
from ..models.player import Profile
from ..services.change_feed import ROOM_CLOSED_MESSAGE

logger = logging.getLogger(__name__)

match_bp = Blueprint('match', __name__)

ERROR_STATUS = {
    RoomNotFound: 404,
    ColorConflict: 409,
    RoomFull: 409,
    InvalidGameConfig: 400
}


def get_match_service():
    return current_app.extensions['match_service']


def get_current_participant():
    """Opaque participant id, stable for the lifetime of the session."""
    session_id = session.get('session_id')
    if not session_id:
        session_id = secrets.token_hex(8)
        session['session_id'] = session_id
        logger.info(f"Created new session: {session_id}")
    return session_id


def error_response(error):
    if isinstance(error, StoreError):
        return jsonify({'error': str(error), 'retryable': True}), 503
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return jsonify({'error': str(error)}), status
    return jsonify({'error': str(error)}), 400


def request_room_id(data):
    room_id = normalize_room_id(data.get('room_id'))
    if not room_id:
        raise InvalidGameConfig('Room ID required')
    return room_id


@match_bp.route('/api/me')
def me():
    return jsonify({'participant_id': get_current_participant()})


@match_bp.route('/api/create_match', methods=['POST'])
def create_match():
    try:
        participant_id = get_current_participant()
        data = request.get_json(silent=True) or {}
        profile = Profile.from_request(data, participant_id)
        config = {key: data[key] for key in ('max_rounds', 'rows', 'cols') if key in data}

        service = get_match_service()
        room_id = service.create_match(data.get('game_type'), participant_id, profile, config)
        return jsonify({
            'room_id': room_id,
            'record': service.get_match(room_id)
        })
    except SpherePlayError as e:
        logger.error(f"Error creating match: {e}")
        return error_response(e)
    except Exception:
        logger.exception("Error creating match")
        return jsonify({'error': 'Internal server error'}), 500


@match_bp.route('/api/join_match', methods=['POST'])
def join_match():
    try:
        participant_id = get_current_participant()
        data = request.get_json(silent=True) or {}
        room_id = request_room_id(data)
        profile = Profile.from_request(data, participant_id)

        record = get_match_service().join_match(room_id, participant_id, profile)
        return jsonify({
            'room_id': room_id,
            'record': record
        })
    except SpherePlayError as e:
        logger.error(f"Failed to join match: {e}")
        return error_response(e)
    except Exception:
        logger.exception("Error joining match")
        return jsonify({'error': 'Internal server error'}), 500


@match_bp.route('/api/room/<room_id>')
def get_room(room_id):
    try:
        record = get_match_service().get_match(room_id)
        if record is None:
            return jsonify({'error': 'Room not found!'}), 404
        return jsonify({
            'room_id': normalize_room_id(room_id),
            'record': record
        })
    except SpherePlayError as e:
        return error_response(e)


def _room_action(action):
    """Run a service call that returns the new record or None when rejected."""
    try:
        participant_id = get_current_participant()
        data = request.get_json(silent=True) or {}
        room_id = request_room_id(data)
        service = get_match_service()
        if action == 'move':
            record = service.make_move(room_id, participant_id, data.get('move'))
        elif action == 'next_round':
            record = service.next_round(room_id, participant_id)
        else:
            record = service.request_rematch(room_id, participant_id)

        # Rejections are expected races, not errors
        accepted = record is not None
        return jsonify({
            'accepted': accepted,
            'record': record if accepted else service.get_match(room_id)
        })
    except SpherePlayError as e:
        return error_response(e)
    except Exception:
        logger.exception(f"Error handling {action}")
        return jsonify({'error': 'Internal server error'}), 500


@match_bp.route('/api/move', methods=['POST'])
def make_move():
    return _room_action('move')


@match_bp.route('/api/next_round', methods=['POST'])
def next_round():
    return _room_action('next_round')


@match_bp.route('/api/rematch', methods=['POST'])
def rematch():
    return _room_action('rematch')


@match_bp.route('/api/abandon', methods=['POST'])
def abandon():
    try:
        participant_id = get_current_participant()
        data = request.get_json(silent=True) or {}
        room_id = request_room_id(data)
        service = get_match_service()

        record = service.get_match(room_id)
        if record is not None and service.get_role(record, participant_id) is None:
            logger.error(f"Player {participant_id} not authorized to abandon room {room_id}")
            return jsonify({'error': 'Not authorized'}), 403

        deleted = service.abandon_match(room_id)
        return jsonify({'success': True, 'deleted': deleted})
    except SpherePlayError as e:
        return error_response(e)
    except Exception:
        logger.exception("Error abandoning match")
        return jsonify({'error': 'Internal server error'}), 500


def register_socket_events(socketio):
    @socketio.on('subscribe_room')
    def on_subscribe_room(data):
        room_id = normalize_room_id((data or {}).get('room_id'))
        if not room_id:
            logger.error("Invalid room ID in subscribe_room")
            return
        try:
            record = get_match_service().get_match(room_id)
        except StoreError:
            emit('store_error', {'room_id': room_id, 'retryable': True})
            return

        join_room(room_id)
        logger.info(f"Socket joined room {room_id}")
        if record is None:
            emit('room_closed', {
                'room_id': room_id,
                'reason': 'not_found',
                'message': ROOM_CLOSED_MESSAGE
            })
        else:
            emit('room_snapshot', {'room_id': room_id, 'record': record})

    @socketio.on('unsubscribe_room')
    def on_unsubscribe_room(data):
        room_id = normalize_room_id((data or {}).get('room_id'))
        if room_id:
            leave_room(room_id)

    @socketio.on('make_move')
    def on_make_move(data):
        data = data or {}
        room_id = normalize_room_id(data.get('room_id'))
        participant_id = session.get('session_id')
        if not room_id or not participant_id:
            logger.error("Invalid session or room ID in make_move")
            return
        try:
            # The new snapshot reaches both players through the change feed
            get_match_service().make_move(room_id, participant_id, data.get('move'))
        except RoomNotFound:
            emit('room_closed', {
                'room_id': room_id,
                'reason': 'not_found',
                'message': ROOM_CLOSED_MESSAGE
            })
        except StoreError:
            emit('store_error', {'room_id': room_id, 'retryable': True})
        except Exception:
            logger.exception(f"Error handling socket move in room {room_id}")
