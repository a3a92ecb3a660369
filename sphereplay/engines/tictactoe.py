from ..errors import MoveRejected
from ..models.match import TICTACTOE, HOST, GUEST, DRAW, other_role
from .base import RuleEngine, parse_index

LINES = [
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6)
]
SYMBOLS = {HOST: 'X', GUEST: 'O'}


class TicTacToeEngine(RuleEngine):
    game_type = TICTACTOE

    def initial_state(self, config=None):
        return {'board': [None] * 9}

    def _apply(self, record, role, move):
        cell = parse_index(move, 9)
        board = record['board']
        if board[cell] is not None:
            raise MoveRejected(f"Cell {cell} is already taken")

        board[cell] = SYMBOLS[role]
        record['turn'] = other_role(role)
        record['winner'] = self.check_winner(board)

    @staticmethod
    def check_winner(board):
        for a, b, c in LINES:
            if board[a] and board[a] == board[b] == board[c]:
                return board[a]
        if all(board):
            return DRAW
        return None
