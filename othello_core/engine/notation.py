"""
Algebraic notation for Othello squares.

Converts between ``(row, col)`` squares and coordinate notation such as
``'d3'``: the file letter is the column (a-h), the rank digit is the row
plus one. Move lists are written as concatenated squares, with ``'--'``
standing for a pass.
"""

from typing import List, Optional, Sequence, Tuple

from .board import SIZE

# Special string for pass moves (no available moves)
PASS_NOTATION = '--'

FILES = "abcdefgh"
RANKS = "12345678"


def square_to_notation(row: int, col: int) -> str:
    """Convert a board square to coordinate notation (e.g., (2, 3) -> 'd3')."""
    if not (0 <= row < SIZE and 0 <= col < SIZE):
        raise ValueError(f"Invalid square: ({row}, {col})")
    return FILES[col] + RANKS[row]


def notation_to_square(notation: str) -> Tuple[int, int]:
    """Convert coordinate notation (e.g., 'd3') to a (row, col) square."""
    if notation == PASS_NOTATION:
        raise ValueError(f"Cannot convert pass notation '{PASS_NOTATION}' to a square")
    if len(notation) != 2:
        raise ValueError(f"bad square: {notation!r}")
    col = FILES.find(notation[0].lower())
    row = RANKS.find(notation[1])
    if col < 0 or row < 0:
        raise ValueError(f"bad square: {notation!r}")
    return row, col


def moves_to_string(moves: Sequence[Optional[Tuple[int, int]]]) -> str:
    """Convert a list of squares to a notation string. ``None`` entries are passes."""
    return ''.join(
        PASS_NOTATION if move is None else square_to_notation(*move)
        for move in moves
    )


def string_to_moves(moves_str: str) -> List[Optional[Tuple[int, int]]]:
    """Parse a notation string into squares, with ``None`` for each pass.

    Raises ValueError on any malformed pair.
    """
    if len(moves_str) % 2:
        raise ValueError(f"Incomplete notation at end of: {moves_str}")

    moves: List[Optional[Tuple[int, int]]] = []
    for i in range(0, len(moves_str), 2):
        pair = moves_str[i:i + 2]
        if pair == PASS_NOTATION:
            moves.append(None)
        else:
            moves.append(notation_to_square(pair))
    return moves


def is_valid_notation(moves_str: str) -> bool:
    """Check if a moves string contains valid coordinate notation."""
    try:
        string_to_moves(moves_str)
    except ValueError:
        return False
    return True
