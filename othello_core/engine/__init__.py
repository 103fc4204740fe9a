"""Rules engine: board state, move generation, undo and notation"""

from .board import GameState, Disk, Move, InvalidSquareError, opponent, SIZE
from .notation import square_to_notation, notation_to_square, moves_to_string, string_to_moves
from .perft import perft, play_moves

__all__ = [
    'GameState',
    'Disk',
    'Move',
    'InvalidSquareError',
    'opponent',
    'SIZE',
    'square_to_notation',
    'notation_to_square',
    'moves_to_string',
    'string_to_moves',
    'perft',
    'play_moves',
]
