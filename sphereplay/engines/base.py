import copy

from ..errors import MoveRejected
from ..models.match import ROLES


def parse_index(value, size):
    """Return ``value`` as a board index in ``range(size)`` or reject the move."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise MoveRejected(f"Invalid index: {value!r}")
    if not 0 <= value < size:
        raise MoveRejected(f"Index {value} out of range")
    return value


class RuleEngine:
    """Validates and applies moves for one game variant.

    Engines never mutate the record they are given: every accepted move
    produces a new record, and every precondition is read from that input
    rather than from what a client last rendered.
    """

    game_type = None
    has_turns = True

    def initial_state(self, config=None):
        raise NotImplementedError

    def variant_config(self, record):
        """Settings that survive a rematch (rounds, grid size)."""
        return {}

    def reset_state(self, record):
        return self.initial_state(self.variant_config(record))

    def check_can_move(self, record, role):
        if role not in ROLES:
            raise MoveRejected("Player is not in this match")
        if record.get('guest_id') is None:
            raise MoveRejected("Waiting for an opponent")
        if record.get('winner') is not None:
            raise MoveRejected("Match is already decided")
        if self.has_turns and record.get('turn') != role:
            raise MoveRejected("Not your turn")

    def apply_move(self, record, role, move):
        self.check_can_move(record, role)
        updated = copy.deepcopy(record)
        self._apply(updated, role, move)
        return updated

    def _apply(self, record, role, move):
        raise NotImplementedError
