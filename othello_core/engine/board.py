"""
Othello game state: board, side to move, and undo history.

The board is an 8x8 ``int8`` grid of :class:`Disk` values indexed as
``board[row, col]``. Row 0 is rank 1 in algebraic notation and column 0 is
file a, so the opening move ``d3`` is square ``(2, 3)``.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import IntEnum
from typing import FrozenSet, Iterable, List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

SIZE = 8

# (dr, dc) for all eight neighbours
DIRECTIONS = tuple(
    (dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0)
)

Square = Tuple[int, int]


class Disk(IntEnum):
    EMPTY = 0
    BLACK = 1
    WHITE = 2

    def opponent(self) -> "Disk":
        return opponent(self)

    @property
    def label(self) -> str:
        return self.name.capitalize()


_OPPONENT = {Disk.EMPTY: Disk.EMPTY, Disk.BLACK: Disk.WHITE, Disk.WHITE: Disk.BLACK}
_SYMBOLS = {Disk.EMPTY: ".", Disk.BLACK: "B", Disk.WHITE: "W"}


def opponent(disk: Disk) -> Disk:
    """Return the other colour; EMPTY maps to EMPTY."""
    return _OPPONENT[Disk(disk)]


class InvalidSquareError(ValueError):
    """Raised when a square lies outside the 8x8 board."""


@dataclass(frozen=True)
class Move:
    """Undo record for one applied move."""
    row: int
    col: int
    player: Disk
    flips: Tuple[Square, ...]

    @property
    def square(self) -> Square:
        return (self.row, self.col)


def _check_square(row: int, col: int) -> None:
    if not (0 <= row < SIZE and 0 <= col < SIZE):
        raise InvalidSquareError(f"square out of range: ({row}, {col})")


def _check_colour(player: Disk) -> Disk:
    player = Disk(player)
    if player == Disk.EMPTY:
        raise ValueError("player must be BLACK or WHITE")
    return player


class GameState:
    """Complete state of an Othello game.

    Holds the grid, the side to move and a LIFO stack of :class:`Move`
    records used by :meth:`undo_move`. Not thread-safe; use one instance per
    game and synchronise externally if shared.
    """

    def __init__(self) -> None:
        self._board = np.zeros((SIZE, SIZE), dtype=np.int8)
        self._current = Disk.BLACK
        self._history: List[Move] = []
        self.reset()

    @classmethod
    def from_snapshot(cls, board: Iterable, current_player: Disk = Disk.BLACK) -> GameState:
        """Build a state from an 8x8 grid of Disk values. History starts empty."""
        grid = np.asarray(board)
        if grid.shape != (SIZE, SIZE):
            raise ValueError(f"board must be {SIZE}x{SIZE}, got {grid.shape}")
        valid = [d.value for d in Disk]
        # object arrays hold mixed cell types or ints too large for int64
        if grid.dtype == object:
            if not all(
                isinstance(v, (int, np.integer)) and not isinstance(v, bool) and int(v) in valid
                for v in grid.flat
            ):
                raise ValueError("board contains values that are not Disk members")
        elif not np.issubdtype(grid.dtype, np.integer):
            raise ValueError(f"board cells must be integers, got dtype {grid.dtype}")
        elif not np.isin(grid, valid).all():
            raise ValueError("board contains values that are not Disk members")
        state = cls()
        state._board[:, :] = grid.astype(np.int8)
        state._current = _check_colour(current_player)
        return state

    def reset(self) -> None:
        """Restore the standard opening, Black to move, empty history."""
        self._board.fill(Disk.EMPTY)
        self._board[3, 3] = self._board[4, 4] = Disk.WHITE
        self._board[3, 4] = self._board[4, 3] = Disk.BLACK
        self._history.clear()
        self._current = Disk.BLACK
        logger.debug("game reset")

    # -- queries ---------------------------------------------------------

    @property
    def current_player(self) -> Disk:
        return self._current

    @property
    def history(self) -> Tuple[Move, ...]:
        return tuple(self._history)

    def disk_at(self, row: int, col: int) -> Disk:
        _check_square(row, col)
        return Disk(int(self._board[row, col]))

    def snapshot(self) -> np.ndarray:
        """Read-only deep copy of the grid."""
        view = self._board.copy()
        view.setflags(write=False)
        return view

    @staticmethod
    def is_corner(row: int, col: int) -> bool:
        _check_square(row, col)
        return row in (0, SIZE - 1) and col in (0, SIZE - 1)

    def flips_for(self, row: int, col: int, player: Optional[Disk] = None) -> Tuple[Square, ...]:
        """Squares that a disk of ``player`` placed at (row, col) would flip.

        Empty when the move is illegal.
        """
        _check_square(row, col)
        player = self._current if player is None else _check_colour(player)
        if self._board[row, col] != Disk.EMPTY:
            return ()
        other = opponent(player)
        flips: List[Square] = []
        for dr, dc in DIRECTIONS:
            run: List[Square] = []
            r, c = row + dr, col + dc
            while 0 <= r < SIZE and 0 <= c < SIZE and self._board[r, c] == other:
                run.append((r, c))
                r += dr
                c += dc
            # run counts only when closed by our own disk on the board
            if run and 0 <= r < SIZE and 0 <= c < SIZE and self._board[r, c] == player:
                flips.extend(run)
        return tuple(flips)

    def is_legal(self, row: int, col: int, player: Optional[Disk] = None) -> bool:
        return bool(self.flips_for(row, col, player))

    def legal_moves(self, player: Optional[Disk] = None) -> FrozenSet[Square]:
        player = self._current if player is None else _check_colour(player)
        return frozenset(
            (r, c)
            for r in range(SIZE)
            for c in range(SIZE)
            if self._board[r, c] == Disk.EMPTY and self.flips_for(r, c, player)
        )

    def has_legal_moves(self, player: Optional[Disk] = None) -> bool:
        return bool(self.legal_moves(player))

    def is_game_over(self) -> bool:
        return not self.has_legal_moves(Disk.BLACK) and not self.has_legal_moves(Disk.WHITE)

    def winner(self) -> Optional[Disk]:
        """Colour with more disks once the game is over; None on a tie or mid-game."""
        if not self.is_game_over():
            return None
        black, white = self.score(Disk.BLACK), self.score(Disk.WHITE)
        if black > white:
            return Disk.BLACK
        if white > black:
            return Disk.WHITE
        return None

    def score(self, player: Disk) -> int:
        return int(np.count_nonzero(self._board == Disk(player)))

    def empty_count(self) -> int:
        return self.score(Disk.EMPTY)

    def evaluate(self, player: Disk) -> int:
        """Disk-count difference from ``player``'s point of view."""
        player = Disk(player)
        return self.score(player) - self.score(opponent(player))

    # -- commands --------------------------------------------------------

    def apply_move(self, row: int, col: int) -> bool:
        """Play (row, col) for the side to move. False, and no change, if illegal."""
        player = self._current
        flips = self.flips_for(row, col, player)
        if not flips:
            logger.debug("illegal move %s at (%d, %d)", player.name, row, col)
            return False
        self._history.append(Move(row, col, player, flips))
        self._board[row, col] = player
        for r, c in flips:
            self._board[r, c] = player
        self.switch_turn()
        return True

    def switch_turn(self) -> None:
        self._current = opponent(self._current)

    # A pass is a plain turn switch; it is not recorded in history.
    pass_turn = switch_turn

    def undo_move(self) -> Optional[Move]:
        """Take back the newest move. Returns it, or None when history is empty."""
        if not self._history:
            return None
        last = self._history.pop()
        self._board[last.row, last.col] = Disk.EMPTY
        restored = opponent(last.player)
        for r, c in last.flips:
            self._board[r, c] = restored
        self._current = last.player
        logger.debug("undid %s at (%d, %d), %d flips", last.player.name, last.row, last.col, len(last.flips))
        return last

    def greedy_move(self, player: Optional[Disk] = None, rng: Optional[random.Random] = None) -> Optional[Square]:
        """Legal square with the most immediate flips, or None.

        Ties go to the first square in row-major order unless ``rng`` is
        given, in which case one of the tied squares is drawn from it.
        """
        player = self._current if player is None else _check_colour(player)
        best: List[Square] = []
        best_count = 0
        for square in sorted(self.legal_moves(player)):
            count = len(self.flips_for(square[0], square[1], player))
            if count > best_count:
                best, best_count = [square], count
            elif count == best_count:
                best.append(square)
        if not best:
            return None
        return rng.choice(best) if rng is not None else best[0]

    def select_greedy_move(self, player: Optional[Disk] = None, rng: Optional[random.Random] = None) -> Optional[Move]:
        """Apply the greedy move for the side to move; None if it has no legal move."""
        if player is not None and _check_colour(player) != self._current:
            raise ValueError(f"{Disk(player).name} is not the side to move")
        square = self.greedy_move(rng=rng)
        if square is None:
            return None
        self.apply_move(*square)
        return self._history[-1]

    # -- copying ---------------------------------------------------------

    def clone(self) -> GameState:
        copy = type(self).__new__(type(self))
        copy._board = self._board.copy()
        copy._current = self._current
        # Move records are frozen, so a new list is enough
        copy._history = list(self._history)
        return copy

    def __copy__(self) -> GameState:
        return self.clone()

    def __deepcopy__(self, memo) -> GameState:
        return self.clone()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameState):
            return NotImplemented
        return (
            self._current == other._current
            and np.array_equal(self._board, other._board)
            and self._history == other._history
        )

    __hash__ = None  # mutable

    def __str__(self) -> str:
        lines = []
        for r in range(SIZE):
            lines.append(" ".join(_SYMBOLS[Disk(int(v))] for v in self._board[r]))
        return "\n".join(lines) + "\n"

    def __repr__(self) -> str:
        return (
            f"GameState(to_move={self._current.name}, black={self.score(Disk.BLACK)}, "
            f"white={self.score(Disk.WHITE)}, plies={len(self._history)})"
        )
