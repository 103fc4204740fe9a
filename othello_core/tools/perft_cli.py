from __future__ import annotations

import argparse
import sys
from time import perf_counter
from typing import Optional

from othello_core.engine.notation import is_valid_notation
from othello_core.engine.perft import perft, play_moves


def main(argv: Optional[list] = None) -> None:
    p = argparse.ArgumentParser(prog="othello-perft")
    p.add_argument("--depth", type=int, required=True)
    p.add_argument("--position", type=str, default=None, help="move sequence like d3c5f6, '--' for a pass")
    args = p.parse_args(argv)

    if args.depth < 0:
        p.error("--depth must be non-negative")

    moves = []
    if args.position:
        if not is_valid_notation(args.position):
            p.error(f"bad move sequence: {args.position}")
        moves = [args.position[i : i + 2] for i in range(0, len(args.position), 2)]
    try:
        state = play_moves(None, moves)
    except ValueError as exc:
        print(f"othello-perft: {exc}", file=sys.stderr)
        sys.exit(2)

    t0 = perf_counter()
    n = perft(state, args.depth)
    dt = perf_counter() - t0
    print(f"perft(d={args.depth})={n} in {dt:.3f}s")


if __name__ == "__main__":
    main()
