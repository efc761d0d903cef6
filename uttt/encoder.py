"""
Encode a GlobalState to a fixed-size vector for search or learning code.
State: meta cells (9), local cells (9x9), side to move, next board.
Values: 0 empty, +1 / -1 from the side to move's view (+1 me, -1 opponent).
"""

import numpy as np

from uttt.game import GlobalState, Mark, Move, enumerate_legal_moves

# State vector: meta 9 + local 81 + side to move 1 + next board 10 one-hot = 101
STATE_DIM = 9 + 81 + 1 + 10
MOVE_DIM = 81  # move index = board_id * 9 + cell_id

_META = 0
_LOCAL = 9
_SIDE = 90
_NEXT = 91  # 91 = any, 92..100 = board 0..8


def move_to_index(move: Move) -> int:
    """Convert (board_id, cell_id) to index 0..80."""
    i, j = move
    if not (0 <= i < 9 and 0 <= j < 9):
        raise ValueError(f"move out of range: {move!r}")
    return i * 9 + j


def index_to_move(idx: int) -> Move:
    """Convert index 0..80 to (board_id, cell_id)."""
    if not 0 <= idx < MOVE_DIM:
        raise ValueError(f"move index out of range: {idx!r}")
    return idx // 9, idx % 9


def _value(mark: Mark, me: Mark) -> float:
    if mark is Mark.EMPTY:
        return 0.0
    return 1.0 if mark is me else -1.0


def encode_state(state: GlobalState) -> np.ndarray:
    """Encode state to vector of shape (STATE_DIM,)."""
    out = np.zeros(STATE_DIM, dtype=np.float32)
    me = state.current_player

    for i, mark in enumerate(state.meta_cells):
        out[_META + i] = _value(mark, me)

    for i, board in enumerate(state.boards):
        for j, mark in enumerate(board.cells):
            out[_LOCAL + i * 9 + j] = _value(mark, me)

    # +1 when PLAYER_0 is to move, -1 for PLAYER_1
    out[_SIDE] = 1.0 if me is Mark.PLAYER_0 else -1.0

    if state.next_board is None:
        out[_NEXT] = 1.0
    else:
        out[_NEXT + 1 + state.next_board] = 1.0

    return out


def legal_mask(state: GlobalState) -> np.ndarray:
    """Return float array of shape (81,): 1.0 where the move is legal."""
    mask = np.zeros(MOVE_DIM, dtype=np.float32)
    for move in enumerate_legal_moves(state):
        mask[move_to_index(move)] = 1.0
    return mask
