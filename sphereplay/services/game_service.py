from ..engines import get_engine
from ..errors import MoveRejected
from ..models.match import RPS, HOST, new_record, other_role, empty_pair


class GameService:
    """Routes a record to the rule engine named by its ``game_type``."""

    @staticmethod
    def new_match(game_type, host_id, profile, config=None):
        engine = get_engine(game_type)
        return new_record(game_type, host_id, profile, engine.initial_state(config))

    @staticmethod
    def apply_move(record, role, move):
        return get_engine(record['game_type']).apply_move(record, role, move)

    @staticmethod
    def next_round(record, role):
        if record['game_type'] != RPS:
            raise MoveRejected("Only rock paper scissors has rounds")
        if role is None:
            raise MoveRejected("Player is not in this match")
        return get_engine(RPS).next_round(record)

    @staticmethod
    def request_rematch(record, role):
        """Raise the acting role's rematch flag, resetting the match once both agree."""
        if role is None:
            raise MoveRejected("Player is not in this match")
        if record.get('winner') is None:
            raise MoveRejected("Match is still in progress")

        rematch = dict(record.get('rematch') or {})
        if rematch.get(role):
            raise MoveRejected("Rematch already requested")

        updated = dict(record)
        if not rematch.get(other_role(role)):
            rematch[role] = True
            updated['rematch'] = rematch
            return updated

        engine = get_engine(record['game_type'])
        updated.update(engine.reset_state(record))
        first_turn = other_role(record.get('first_turn', HOST))
        updated['first_turn'] = first_turn
        updated['turn'] = first_turn
        updated['winner'] = None
        updated['rematch'] = empty_pair(False)
        return updated
