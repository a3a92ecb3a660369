from ..errors import InvalidGameConfig
from .tictactoe import TicTacToeEngine
from .connect4 import Connect4Engine
from .rps import RPSEngine
from .dots import DotsEngine

ENGINES = {
    engine.game_type: engine
    for engine in (TicTacToeEngine(), Connect4Engine(), RPSEngine(), DotsEngine())
}


def get_engine(game_type):
    try:
        return ENGINES[game_type]
    except KeyError:
        raise InvalidGameConfig(f"Unknown game type: {game_type!r}") from None
