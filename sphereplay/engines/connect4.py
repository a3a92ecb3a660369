from ..errors import MoveRejected
from ..models.match import CONNECT4, DRAW, other_role, role_label
from .base import RuleEngine, parse_index

ROWS = 6
COLS = 7
# right, down, down-right, down-left
DIRECTIONS = ((0, 1), (1, 0), (1, 1), (1, -1))


class Connect4Engine(RuleEngine):
    game_type = CONNECT4

    def initial_state(self, config=None):
        return {'board': [None] * (ROWS * COLS)}

    def _apply(self, record, role, move):
        col = parse_index(move, COLS)
        board = record['board']
        row = self.drop_row(board, col)
        if row is None:
            raise MoveRejected(f"Column {col} is full")

        board[row * COLS + col] = role
        record['turn'] = other_role(role)
        record['winner'] = self.check_winner(board)

    @staticmethod
    def drop_row(board, col):
        """Lowest empty row in ``col``, or None when the column is full."""
        for row in range(ROWS - 1, -1, -1):
            if board[row * COLS + col] is None:
                return row
        return None

    @staticmethod
    def check_winner(board):
        for row in range(ROWS):
            for col in range(COLS):
                piece = board[row * COLS + col]
                if piece is None:
                    continue
                for dr, dc in DIRECTIONS:
                    end_row = row + 3 * dr
                    end_col = col + 3 * dc
                    if not (0 <= end_row < ROWS and 0 <= end_col < COLS):
                        continue
                    if all(board[(row + i * dr) * COLS + (col + i * dc)] == piece for i in range(1, 4)):
                        return role_label(piece)
        if all(board):
            return DRAW
        return None
