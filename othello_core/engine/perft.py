from __future__ import annotations

from typing import Iterable, Optional

from .board import GameState
from .notation import notation_to_square, PASS_NOTATION


def perft(state: GameState, depth: int) -> int:
    """Count leaf positions ``depth`` plies below ``state``.

    A forced pass counts as one ply; a finished game is a single leaf.
    The state is restored before returning.
    """
    if depth == 0:
        return 1
    moves = state.legal_moves()
    if not moves:
        if state.is_game_over():
            return 1
        state.pass_turn()
        try:
            return perft(state, depth - 1)
        finally:
            state.pass_turn()
    total = 0
    for row, col in moves:
        state.apply_move(row, col)
        total += perft(state, depth - 1)
        state.undo_move()
    return total


def play_moves(state: Optional[GameState], moves: Iterable[str]) -> GameState:
    """Replay algebraic moves (``'--'`` passes) from ``state`` or the opening."""
    s = GameState() if state is None else state
    for mv in moves:
        if mv == PASS_NOTATION:
            if s.has_legal_moves():
                raise ValueError(f"pass is not allowed, {s.current_player.name} has moves")
            s.pass_turn()
            continue
        row, col = notation_to_square(mv)
        if not s.apply_move(row, col):
            raise ValueError(f"illegal move: {mv}")
    return s
