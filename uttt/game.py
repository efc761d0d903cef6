"""
Ultimate Tic-Tac-Toe rule engine.
Rules: https://en.wikipedia.org/wiki/Ultimate_tic-tac-toe

State is immutable. Use is_valid_move(), apply_move(), enumerate_legal_moves(),
check_global_outcome() and is_terminal() to drive a game; apply_move() returns
a new GlobalState and never touches the one it was given.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Literal

logger = logging.getLogger(__name__)

BOARD_CELLS = 9

# Winning lines for a 3x3 board (indices 0..8)
LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # cols
    (0, 4, 8), (2, 4, 6),              # diags
)

# Move = (board_id, cell_id), each 0..8
Move = tuple[int, int]
Status = Literal["ongoing", "won", "draw"]


class Mark(Enum):
    """Content of a cell, or the winner of a local board."""

    EMPTY = ""
    PLAYER_0 = "X"
    PLAYER_1 = "O"

    @property
    def opponent(self) -> "Mark":
        if self is Mark.PLAYER_0:
            return Mark.PLAYER_1
        if self is Mark.PLAYER_1:
            return Mark.PLAYER_0
        raise ValueError("EMPTY has no opponent")


class IllegalMoveError(ValueError):
    """Raised by apply_move() for a move is_valid_move() rejects."""

    def __init__(
        self,
        board_id: Any,
        cell_id: Any,
        next_board: int | None,
        board_complete: bool | None,
        reason: str,
    ) -> None:
        self.board_id = board_id
        self.cell_id = cell_id
        self.next_board = next_board
        self.board_complete = board_complete
        self.reason = reason
        target = "any" if next_board is None else next_board
        super().__init__(
            f"illegal move ({board_id!r}, {cell_id!r}): {reason} "
            f"[next_board={target}, board_complete={board_complete}]"
        )


@dataclass(frozen=True)
class Outcome:
    status: Status = "ongoing"
    winner: Mark = Mark.EMPTY

    def __post_init__(self) -> None:
        if self.status not in ("ongoing", "won", "draw"):
            raise ValueError(f"unknown outcome status: {self.status!r}")
        if (self.status == "won") != (self.winner is not Mark.EMPTY):
            raise ValueError("a won outcome needs a player, other outcomes none")

    @classmethod
    def ongoing(cls) -> "Outcome":
        return cls()

    @classmethod
    def won(cls, mark: Mark) -> "Outcome":
        return cls("won", mark)

    @classmethod
    def draw(cls) -> "Outcome":
        return cls("draw")

    @property
    def is_terminal(self) -> bool:
        return self.status != "ongoing"


@dataclass(frozen=True)
class LocalBoard:
    """One 3x3 board. winner stays EMPTY when the board fills without a line."""

    cells: tuple[Mark, ...] = (Mark.EMPTY,) * BOARD_CELLS
    complete: bool = False
    winner: Mark = Mark.EMPTY

    def __post_init__(self) -> None:
        if len(self.cells) != BOARD_CELLS or not all(isinstance(c, Mark) for c in self.cells):
            raise ValueError("a local board holds exactly 9 Mark cells")
        if not isinstance(self.complete, bool) or not isinstance(self.winner, Mark):
            raise ValueError("complete must be a bool and winner a Mark")
        if self.winner is not Mark.EMPTY and not self.complete:
            raise ValueError("a board with a winner must be complete")
        # complete / winner must be what the cells say
        line_marks = {self.cells[a] for a, b, c in LINES if _is_line(self.cells, a, b, c)}
        if len(line_marks) > 1:
            raise ValueError("both players hold a line on one board")
        expected = (True, line_marks.pop()) if line_marks else (self.is_full, Mark.EMPTY)
        if (self.complete, self.winner) != expected:
            raise ValueError(
                f"complete={self.complete}, winner={self.winner.value or None} do not match the cells "
                f"(expected complete={expected[0]}, winner={expected[1].value or None})"
            )

    @property
    def drawn(self) -> bool:
        return self.complete and self.winner is Mark.EMPTY

    @property
    def is_full(self) -> bool:
        return all(c is not Mark.EMPTY for c in self.cells)


def _empty_boards() -> tuple[LocalBoard, ...]:
    return (LocalBoard(),) * BOARD_CELLS


@dataclass(frozen=True)
class GlobalState:
    """Nine local boards plus turn, routing and outcome."""

    boards: tuple[LocalBoard, ...] = field(default_factory=_empty_boards)
    next_board: int | None = None  # None = any incomplete board
    current_player: Mark = Mark.PLAYER_0
    outcome: Outcome = field(default_factory=Outcome.ongoing)

    def __post_init__(self) -> None:
        if len(self.boards) != BOARD_CELLS or not all(isinstance(b, LocalBoard) for b in self.boards):
            raise ValueError("a game holds exactly 9 local boards")
        if self.current_player is Mark.EMPTY or not isinstance(self.current_player, Mark):
            raise ValueError("current_player must be PLAYER_0 or PLAYER_1")
        if self.next_board is not None and not _is_index(self.next_board):
            raise ValueError(f"next_board out of range: {self.next_board!r}")
        if self.next_board is not None and self.boards[self.next_board].complete:
            raise ValueError(f"next_board {self.next_board} is already complete")
        if not isinstance(self.outcome, Outcome) or self.outcome != _outcome_of(self.boards):
            raise ValueError(f"outcome {self.outcome!r} does not match the boards")

    @property
    def meta_cells(self) -> tuple[Mark, ...]:
        """Winners of the local boards, read as one 3x3 board."""
        return tuple(b.winner for b in self.boards)

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-compatible snapshot of the state."""
        return {
            "boards": [
                {
                    "cells": [c.value for c in b.cells],
                    "complete": b.complete,
                    "winner": b.winner.value or None,
                }
                for b in self.boards
            ],
            "nextBoardId": self.next_board,
            "currentPlayer": self.current_player.value,
            "outcome": {
                "status": self.outcome.status,
                "winner": self.outcome.winner.value or None,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlobalState":
        """Rebuild a state from to_dict() output. Raises ValueError on bad data."""
        try:
            boards = tuple(_board_from_dict(b) for b in data["boards"])
            outcome_data = data.get("outcome") or {}
            outcome = Outcome(
                outcome_data.get("status", "ongoing"),
                Mark(outcome_data.get("winner") or ""),
            )
            return cls(
                boards=boards,
                next_board=data.get("nextBoardId"),
                current_player=Mark(data.get("currentPlayer", "X")),
                outcome=outcome,
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed game snapshot: {exc!r}") from exc


def _board_from_dict(data: dict[str, Any]) -> LocalBoard:
    if not isinstance(data["complete"], bool):
        raise ValueError(f"complete must be true or false, got {data['complete']!r}")
    return LocalBoard(
        cells=tuple(Mark(c) for c in data["cells"]),
        complete=data["complete"],
        winner=Mark(data["winner"] or ""),
    )


def initial_state() -> GlobalState:
    return GlobalState()


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < BOARD_CELLS


def _is_line(cells: tuple[Mark, ...], a: int, b: int, c: int) -> bool:
    return cells[a] is not Mark.EMPTY and cells[a] == cells[b] == cells[c]


def winning_mark(marks: Iterable[Mark]) -> Mark | None:
    """Mark of the first complete line, or None."""
    cells = tuple(marks)
    for a, b, c in LINES:
        if _is_line(cells, a, b, c):
            return cells[a]
    return None


def has_winning_line(marks: Iterable[Mark]) -> bool:
    return winning_mark(marks) is not None


def check_local_victory(cells: Iterable[Mark], player: Mark) -> LocalBoard:
    """Settle a board whose cells `player` has just marked."""
    cells = tuple(cells)
    if has_winning_line(cells):
        return LocalBoard(cells, complete=True, winner=player)
    return LocalBoard(cells, complete=all(c is not Mark.EMPTY for c in cells))


def _outcome_of(boards: tuple[LocalBoard, ...]) -> Outcome:
    winner = winning_mark(b.winner for b in boards)
    if winner is not None:
        return Outcome.won(winner)
    if all(b.complete for b in boards):
        return Outcome.draw()
    return Outcome.ongoing()


def check_global_outcome(state: GlobalState) -> Outcome:
    """
    Read the local-board winners as a 3x3 board.
    Drawn local boards count as EMPTY, so only boards won outright form a line.
    """
    return _outcome_of(state.boards)


def reason_for_rejection(state: GlobalState, board_id: Any, cell_id: Any) -> str | None:
    """First legality condition the move fails, or None if it is legal."""
    if state.outcome.is_terminal:
        return "game is over"
    if not _is_index(board_id):
        return "board_id must be an int in 0..8"
    if not _is_index(cell_id):
        return "cell_id must be an int in 0..8"
    board = state.boards[board_id]
    if board.complete:
        return "board is already complete"
    if board.cells[cell_id] is not Mark.EMPTY:
        return "cell is already marked"
    if state.next_board is not None and state.next_board != board_id:
        return f"must play in board {state.next_board}"
    return None


def is_valid_move(state: GlobalState, board_id: Any, cell_id: Any) -> bool:
    return reason_for_rejection(state, board_id, cell_id) is None


def apply_move(state: GlobalState, board_id: int, cell_id: int) -> GlobalState:
    """Return the state after the current player marks (board_id, cell_id)."""
    reason = reason_for_rejection(state, board_id, cell_id)
    if reason is not None:
        complete = state.boards[board_id].complete if _is_index(board_id) else None
        logger.debug("rejected move (%r, %r): %s", board_id, cell_id, reason)
        raise IllegalMoveError(board_id, cell_id, state.next_board, complete, reason)

    player = state.current_player

    # Mark the cell and settle the local board
    new_cells = list(state.boards[board_id].cells)
    new_cells[cell_id] = player
    new_boards = list(state.boards)
    new_boards[board_id] = check_local_victory(new_cells, player)
    boards = tuple(new_boards)

    # Send rule: the cell played names the next board, unless that board is closed
    next_board = None if boards[cell_id].complete else cell_id

    outcome = _outcome_of(boards)
    logger.debug("%s played (%d, %d), next board %s", player.value, board_id, cell_id, next_board)

    if outcome.is_terminal:
        logger.info("game over: %s", outcome.winner.value if outcome.status == "won" else "draw")
        return GlobalState(boards=boards, next_board=next_board, current_player=player, outcome=outcome)
    return GlobalState(boards=boards, next_board=next_board, current_player=player.opponent)


def enumerate_legal_moves(state: GlobalState) -> list[Move]:
    """Return list of (board_id, cell_id) legal moves in ascending order."""
    return [
        (i, j)
        for i in range(BOARD_CELLS)
        for j in range(BOARD_CELLS)
        if is_valid_move(state, i, j)
    ]


def playable_boards(state: GlobalState) -> list[int]:
    """Boards that accept a move right now."""
    if state.outcome.is_terminal:
        return []
    return [
        i
        for i, b in enumerate(state.boards)
        if not b.complete and (state.next_board is None or state.next_board == i)
    ]


def is_terminal(state: GlobalState) -> bool:
    """True if game is over (win or draw)."""
    return state.outcome.is_terminal


def get_result(state: GlobalState) -> Mark | Literal["draw"] | None:
    """Return the winning Mark, 'draw', or None while the game is running."""
    if state.outcome.status == "won":
        return state.outcome.winner
    if state.outcome.status == "draw":
        return "draw"
    return None
