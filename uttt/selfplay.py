"""
Random-vs-random playouts through the public engine contract.
Usage: python -m uttt.selfplay [--count N] [--seed S] [-v]
Prints one line per game and a result tally. Nothing is written to disk.
"""

import argparse
import logging
import random
from collections import Counter
from dataclasses import dataclass
from typing import Iterator

from uttt.game import (
    GlobalState,
    Mark,
    Move,
    apply_move,
    enumerate_legal_moves,
    get_result,
    initial_state,
    is_terminal,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameRecord:
    moves: tuple[Move, ...]
    result: str  # "X", "O" or "draw"
    steps: int
    final_state: GlobalState


def play_random_game(rng: random.Random | None = None) -> GameRecord:
    """Play one game choosing uniformly among legal moves."""
    rng = rng or random.Random()
    state = initial_state()
    played: list[Move] = []
    while not is_terminal(state):
        move = rng.choice(enumerate_legal_moves(state))
        played.append(move)
        state = apply_move(state, *move)
    result = get_result(state)
    label = result.value if isinstance(result, Mark) else "draw"
    return GameRecord(moves=tuple(played), result=label, steps=len(played), final_state=state)


def play_games(count: int, seed: int | None = None) -> Iterator[GameRecord]:
    """Yield `count` random games; the same seed gives the same games."""
    rng = random.Random(seed)
    for idx in range(count):
        record = play_random_game(rng)
        logger.debug("game %d: %s in %d moves", idx + 1, record.result, record.steps)
        yield record


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Random Ultimate Tic-Tac-Toe playouts")
    ap.add_argument("--count", type=int, default=1, help="Number of games to play")
    ap.add_argument("--seed", type=int, default=None, help="Seed for reproducible games")
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    if args.count < 1:
        logger.error("--count must be at least 1, got %d", args.count)
        return 2

    tally: Counter[str] = Counter()
    for idx, record in enumerate(play_games(args.count, seed=args.seed)):
        tally[record.result] += 1
        print(f"Game {idx + 1}: result={record.result} moves={record.steps}")

    print("Tally:", ", ".join(f"{k}={tally[k]}" for k in ("X", "O", "draw")))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
