import secrets
import string
import time

HOST = 'host'
GUEST = 'guest'
ROLES = (HOST, GUEST)

TICTACTOE = 'tictactoe'
CONNECT4 = 'connect4'
RPS = 'rps'
DOTS = 'dots'
GAME_TYPES = (TICTACTOE, CONNECT4, RPS, DOTS)

PALETTE = ('blue', 'red', 'green', 'yellow')
DRAW = 'Draw'

ROOM_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_room_id(length=4):
    return ''.join(secrets.choice(ROOM_ID_ALPHABET) for _ in range(length))


def normalize_room_id(room_id):
    """Room ids are typed by people, so matching ignores case and padding."""
    if not isinstance(room_id, str):
        return ''
    return room_id.strip().upper()


def other_role(role):
    return GUEST if role == HOST else HOST


def role_label(role):
    # Winner labels are capitalised to stay distinct from role tokens
    return 'Host' if role == HOST else 'Guest'


def empty_pair(value=None):
    return {HOST: value, GUEST: value}


def new_record(game_type, host_id, profile, variant_state):
    record = {
        'game_type': game_type,
        'host_id': host_id,
        'host_name': profile.name,
        'host_color': profile.color,
        'guest_id': None,
        'guest_name': None,
        'guest_color': None,
        'turn': HOST,
        'first_turn': HOST,
        'winner': None,
        'rematch': empty_pair(False),
        'created': int(time.time() * 1000)
    }
    record.update(variant_state)
    return record


def get_player_role(record, participant_id):
    if participant_id is None:
        return None
    if participant_id == record.get('host_id'):
        return HOST
    elif participant_id == record.get('guest_id'):
        return GUEST
    return None


def is_player_in_match(record, participant_id):
    return get_player_role(record, participant_id) is not None


def has_guest(record):
    return record.get('guest_id') is not None
