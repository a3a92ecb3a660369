import copy

import pytest
from sphereplay.engines.tictactoe import TicTacToeEngine
from sphereplay.errors import MoveRejected
from sphereplay.models.match import HOST, GUEST, TICTACTOE

engine = TicTacToeEngine()

@pytest.fixture
def game(new_game):
    return new_game(TICTACTOE)

def test_host_plays_center(game):
    record = engine.apply_move(game, HOST, 4)
    assert record['board'][4] == 'X'
    assert record['turn'] == GUEST
    assert record['winner'] is None

def test_input_record_is_not_mutated(game):
    before = copy.deepcopy(game)
    engine.apply_move(game, HOST, 0)
    assert game == before

def test_filled_cell_is_rejected_and_record_unchanged(game):
    record = engine.apply_move(game, HOST, 4)
    before = copy.deepcopy(record)
    with pytest.raises(MoveRejected):
        engine.apply_move(record, GUEST, 4)
    assert record == before

def test_same_move_twice_is_rejected(game):
    record = engine.apply_move(game, HOST, 4)
    with pytest.raises(MoveRejected):
        engine.apply_move(record, HOST, 4)

def test_out_of_turn_move_is_rejected(game):
    with pytest.raises(MoveRejected):
        engine.apply_move(game, GUEST, 0)

def test_no_moves_before_guest_joins(game):
    game['guest_id'] = None
    with pytest.raises(MoveRejected):
        engine.apply_move(game, HOST, 0)

@pytest.mark.parametrize('cell', [-1, 9, '4', None, True, 4.0])
def test_invalid_cells_are_rejected(game, cell):
    with pytest.raises(MoveRejected):
        engine.apply_move(game, HOST, cell)

def test_host_wins_top_row(game, play):
    record = play(engine, game, 0, 3, 1, 4, 2)
    assert record['winner'] == 'X'

def test_guest_wins_diagonal(game, play):
    record = play(engine, game, 0, 2, 1, 4, 8, 6)
    assert record['winner'] == 'O'

def test_full_board_without_line_is_draw(game, play):
    record = play(engine, game, 0, 1, 2, 4, 3, 5, 7, 6)
    assert record['winner'] is None
    record = play(engine, record, 8)
    assert record['winner'] == 'Draw'
    assert all(record['board'])

def test_no_moves_after_win(game, play):
    record = play(engine, game, 0, 3, 1, 4, 2)
    with pytest.raises(MoveRejected):
        engine.apply_move(record, record['turn'], 5)

def test_winner_always_matches_board(game):
    # Every reachable board keeps winner consistent with check_winner
    record = game
    for cell in [4, 0, 8, 2, 6, 1, 7]:
        record = engine.apply_move(record, record['turn'], cell)
        assert record['winner'] in (None, 'X', 'O', 'Draw')
        assert record['winner'] == TicTacToeEngine.check_winner(record['board'])
        if record['winner']:
            break
