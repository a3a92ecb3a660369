import copy

from ..errors import MoveRejected, InvalidGameConfig
from ..models.match import RPS, HOST, GUEST, DRAW, empty_pair, role_label
from .base import RuleEngine

MOVES = ('rock', 'paper', 'scissors')
BEATS = {
    'rock': 'scissors',
    'scissors': 'paper',
    'paper': 'rock'
}
ROUND_OPTIONS = (1, 3, 5)
DEFAULT_ROUNDS = 3


class RPSEngine(RuleEngine):
    """Best-of-N rock paper scissors. Both roles move every round, so there is no turn."""

    game_type = RPS
    has_turns = False

    def initial_state(self, config=None):
        max_rounds = (config or {}).get('max_rounds', DEFAULT_ROUNDS)
        if isinstance(max_rounds, bool) or max_rounds not in ROUND_OPTIONS:
            raise InvalidGameConfig(f"Invalid max_rounds: {max_rounds!r}. Must be one of {ROUND_OPTIONS}")
        return {
            'moves': empty_pair(),
            'scores': empty_pair(0),
            'max_rounds': max_rounds,
            'current_round': 1,
            'round_winner': None
        }

    def variant_config(self, record):
        return {'max_rounds': record['max_rounds']}

    def check_can_move(self, record, role):
        super().check_can_move(record, role)
        if record.get('round_winner') is not None:
            raise MoveRejected("Round is over, waiting for the next round")

    def _apply(self, record, role, move):
        if move not in MOVES:
            raise MoveRejected(f"Invalid move. Must be one of {', '.join(MOVES)}")
        moves = record['moves']
        if moves[role] is not None:
            raise MoveRejected("Player has already made a move")

        moves[role] = move
        if moves[HOST] is None or moves[GUEST] is None:
            return

        round_winner = self.calculate_winner(moves[HOST], moves[GUEST])
        record['round_winner'] = round_winner
        if round_winner == DRAW:
            return

        scores = record['scores']
        scores[round_winner] += 1
        if scores[round_winner] >= self.win_threshold(record['max_rounds']):
            record['winner'] = role_label(round_winner)

    def next_round(self, record):
        """Clear the resolved round. A drawn round is replayed under the same number."""
        if record.get('winner') is not None:
            raise MoveRejected("Match is already decided")
        if record.get('round_winner') is None:
            raise MoveRejected("Round is still in progress")

        updated = copy.deepcopy(record)
        if updated['round_winner'] != DRAW:
            updated['current_round'] += 1
        updated['moves'] = empty_pair()
        updated['round_winner'] = None
        return updated

    @staticmethod
    def calculate_winner(host_move, guest_move):
        if host_move == guest_move:
            return DRAW
        if BEATS[host_move] == guest_move:
            return HOST
        return GUEST

    @staticmethod
    def win_threshold(max_rounds):
        return max_rounds // 2 + 1
