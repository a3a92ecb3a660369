from ..errors import MoveRejected, InvalidGameConfig
from ..models.match import DOTS, DRAW, HOST, GUEST, empty_pair, other_role, role_label
from .base import RuleEngine, parse_index

HORIZONTAL = 'horizontal'
VERTICAL = 'vertical'
LINE_TYPES = {
    'h': HORIZONTAL,
    HORIZONTAL: HORIZONTAL,
    'v': VERTICAL,
    VERTICAL: VERTICAL
}
GRID_SIZES = ((3, 3), (4, 5), (5, 5))


def parse_line(move):
    """Accept ``(line_type, index)`` or ``{"line_type": ..., "index": ...}``."""
    if isinstance(move, dict):
        line_type, index = move.get('line_type'), move.get('index')
    elif isinstance(move, (list, tuple)) and len(move) == 2:
        line_type, index = move
    else:
        raise MoveRejected(f"Invalid line: {move!r}")
    if not isinstance(line_type, str) or line_type not in LINE_TYPES:
        raise MoveRejected(f"Invalid line type: {line_type!r}")
    return LINE_TYPES[line_type], index


class DotsEngine(RuleEngine):
    game_type = DOTS

    def initial_state(self, config=None):
        config = config or {}
        rows = config.get('rows', 3)
        cols = config.get('cols', 3)
        if (rows, cols) not in GRID_SIZES:
            raise InvalidGameConfig(f"Invalid grid size: {rows}x{cols}")
        return {
            'grid_size': {'rows': rows, 'cols': cols},
            'h_lines': [False] * ((rows + 1) * cols),
            'v_lines': [False] * (rows * (cols + 1)),
            'boxes': [None] * (rows * cols),
            'scores': empty_pair(0)
        }

    def variant_config(self, record):
        return dict(record['grid_size'])

    def _apply(self, record, role, move):
        line_type, index = parse_line(move)
        lines = record['h_lines'] if line_type == HORIZONTAL else record['v_lines']
        index = parse_index(index, len(lines))
        if lines[index]:
            raise MoveRejected(f"The {line_type} line {index} is already drawn")

        lines[index] = True
        completed = self.claim_boxes(record, role)
        # Completing a box earns another turn
        if not completed:
            record['turn'] = other_role(role)
        record['winner'] = self.check_winner(record)

    @staticmethod
    def claim_boxes(record, role):
        rows = record['grid_size']['rows']
        cols = record['grid_size']['cols']
        h_lines, v_lines, boxes = record['h_lines'], record['v_lines'], record['boxes']

        completed = 0
        for r in range(rows):
            for c in range(cols):
                box = r * cols + c
                if boxes[box] is not None:
                    continue
                top = h_lines[r * cols + c]
                bottom = h_lines[(r + 1) * cols + c]
                left = v_lines[r * (cols + 1) + c]
                right = v_lines[r * (cols + 1) + c + 1]
                if top and bottom and left and right:
                    boxes[box] = role
                    record['scores'][role] += 1
                    completed += 1
        return completed

    @staticmethod
    def check_winner(record):
        scores = record['scores']
        total = record['grid_size']['rows'] * record['grid_size']['cols']
        if scores[HOST] + scores[GUEST] < total:
            return None
        if scores[HOST] == scores[GUEST]:
            return DRAW
        return role_label(HOST if scores[HOST] > scores[GUEST] else GUEST)
