from __future__ import annotations

import argparse
import logging
import pathlib
import random
import sys
import time
from typing import Callable, Optional, TextIO

from othello_core.engine.board import GameState, Disk, SIZE
from othello_core.engine.notation import FILES, notation_to_square, square_to_notation
from othello_core.logging_setup import setup_logging
from .diag import CONFIG_PATH, PlayConfig, ensure_config, load_config, load_play_config, log_event

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Enter a square such as d3, or one of:\n"
    "  moves  list legal moves\n"
    "  hint   suggest the greedy move\n"
    "  undo   take back your last move\n"
    "  reset  start a new game\n"
    "  quit   leave"
)

_SYMBOLS = {Disk.EMPTY: ".", Disk.BLACK: "B", Disk.WHITE: "W"}


class TerminalGame:
    """Human vs greedy computer on a text terminal.

    Reads commands through ``input_fn`` and writes to ``out`` so the whole
    loop can be driven from tests. ``sleep`` paces the computer's moves.
    """

    def __init__(
        self,
        config: PlayConfig,
        input_fn: Optional[Callable[[str], str]] = None,
        out: Optional[TextIO] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.state = GameState()
        self.human: Optional[Disk] = None if config.human == "none" else Disk[config.human.upper()]
        self.rng = random.Random(config.seed) if config.tie_break == "random" else None
        self._input = input_fn or input
        self._out = out
        self._sleep = sleep

    # -- output ----------------------------------------------------------

    def _write(self, text: str = "") -> None:
        print(text, file=self._out or sys.stdout)

    def render(self) -> str:
        marks = set()
        if self.state.current_player == self.human:
            marks = self.state.legal_moves()
        lines = ["  " + " ".join(FILES[:SIZE])]
        for r in range(SIZE):
            cells = []
            for c in range(SIZE):
                disk = self.state.disk_at(r, c)
                cells.append("*" if (r, c) in marks else _SYMBOLS[disk])
            lines.append(f"{r + 1} " + " ".join(cells))
        lines.append(
            f"Black {self.state.score(Disk.BLACK)} - White {self.state.score(Disk.WHITE)}"
        )
        return "\n".join(lines)

    def status(self) -> str:
        if self.state.is_game_over():
            winner = self.state.winner()
            return f"Game Over! Winner: {winner.label}" if winner else "Game Over! Tie"
        return f"Turn: {self.state.current_player.label}"

    # -- game flow -------------------------------------------------------

    def run(self) -> int:
        while self.play_game():
            answer = self._read("Play again? [y/N] ")
            if answer is None or answer.strip().lower() not in ("y", "yes"):
                break
            self.state.reset()
            log_event("cli", "reset")
        self._write("Goodbye.")
        return 0

    def play_game(self) -> bool:
        """Play until the game ends. False if the player quit first."""
        while True:
            self._auto_pass()
            if self.state.is_game_over():
                self._announce_result()
                return True
            self._write(self.render())
            self._write(self.status())
            if self.state.current_player == self.human:
                if not self._human_turn():
                    return False
            else:
                self._computer_turn()

    def _auto_pass(self) -> None:
        if self.state.is_game_over() or self.state.has_legal_moves():
            return
        skipped = self.state.current_player
        self.state.pass_turn()
        self._write(f"{skipped.label} has no legal moves. Passing to {self.state.current_player.label}")
        log_event("cli", "pass", player=skipped.name)

    def _announce_result(self) -> None:
        self._write(self.render())
        self._write(self.status())
        winner = self.state.winner()
        log_event(
            "cli",
            "game_over",
            winner=winner.name if winner else None,
            black=self.state.score(Disk.BLACK),
            white=self.state.score(Disk.WHITE),
        )

    def _computer_turn(self) -> None:
        if self.config.ai_delay_ms:
            self._sleep(self.config.ai_delay_ms / 1000.0)
        move = self.state.select_greedy_move(rng=self.rng)
        # _auto_pass guarantees a legal move exists here
        assert move is not None
        where = square_to_notation(move.row, move.col)
        self._write(f"{move.player.label} plays {where} (flips {len(move.flips)})")
        log_event("cli", "move", player=move.player.name, square=where, flips=len(move.flips), auto=True)

    def _human_turn(self) -> bool:
        """Read commands until the board changes. False if the player quit."""
        prompt = f"{self.human.label}> "
        while True:
            line = self._read(prompt)
            if line is None:
                return False
            cmd = line.strip().lower()
            if not cmd:
                continue
            if cmd in ("quit", "q", "exit"):
                return False
            if cmd in ("help", "?"):
                self._write(HELP_TEXT)
            elif cmd == "moves":
                squares = sorted(self.state.legal_moves())
                self._write("Legal moves: " + " ".join(square_to_notation(r, c) for r, c in squares))
            elif cmd == "hint":
                square = self.state.greedy_move(rng=self.rng)
                self._write(f"Hint: {square_to_notation(*square)}")
            elif cmd == "undo":
                if self._undo_to_human():
                    return True
                self._write("Nothing to undo.")
            elif cmd == "reset":
                self.state.reset()
                log_event("cli", "reset")
                return True
            else:
                try:
                    row, col = notation_to_square(cmd)
                except ValueError:
                    self._write(f"Unrecognised input: {line.strip()} (type 'help')")
                    continue
                if self.state.apply_move(row, col):
                    log_event("cli", "move", player=self.human.name, square=cmd, auto=False)
                    return True
                self._write(f"Illegal move: {cmd}")

    def _undo_to_human(self) -> bool:
        """Take back moves until the human's most recent one is undone."""
        if not any(m.player == self.human for m in self.state.history):
            return False
        while True:
            move = self.state.undo_move()
            log_event("cli", "undo", player=move.player.name, square=square_to_notation(move.row, move.col))
            if move.player == self.human:
                return True

    def _read(self, prompt: str) -> Optional[str]:
        try:
            return self._input(prompt)
        except EOFError:
            return None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="othello-play", description="Play Othello against a greedy opponent")
    p.add_argument("--config", type=pathlib.Path, default=None, help=f"TOML config file (default {CONFIG_PATH})")
    p.add_argument("--human", choices=["black", "white", "none"], default=None)
    p.add_argument("--delay-ms", type=int, default=None, help="pause before computer moves")
    p.add_argument("--tie-break", choices=["row-major", "random"], default=None)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--log-level", default=None)
    return p


def main(argv: Optional[list] = None) -> None:
    args = build_parser().parse_args(argv)

    created = False
    if args.config is None:
        created = ensure_config(CONFIG_PATH)
        cfg = load_config(CONFIG_PATH)
    else:
        cfg = load_config(args.config)

    # non-table sections are left for load_play_config to reject
    play = cfg.setdefault("play", {})
    if isinstance(play, dict):
        for key, value in (
            ("human", args.human),
            ("ai_delay_ms", args.delay_ms),
            ("tie_break", args.tie_break),
            ("seed", args.seed),
        ):
            if value is not None:
                play[key] = value
    log_cfg = cfg.setdefault("logging", {})
    if isinstance(log_cfg, dict) and args.log_level is not None:
        log_cfg["level"] = args.log_level

    try:
        config = load_play_config(cfg)
    except ValueError as exc:
        print(f"othello-play: {exc}", file=sys.stderr)
        sys.exit(2)

    setup_logging(overwrite=config.log_overwrite, level=config.log_level)
    if created:
        logger.info("Created default configuration at %s", CONFIG_PATH)
    logger.info("starting othello-play: %s", config)

    sys.exit(TerminalGame(config).run())


if __name__ == "__main__":
    main()
