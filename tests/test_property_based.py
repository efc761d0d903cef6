import pytest
from hypothesis import given, settings, strategies as st

from uttt.game import (
    BOARD_CELLS,
    GlobalState,
    IllegalMoveError,
    Mark,
    apply_move,
    check_global_outcome,
    enumerate_legal_moves,
    initial_state,
    is_valid_move,
)

choices = st.lists(st.integers(min_value=0, max_value=10_000), max_size=81)


def walk(picks: list[int]) -> list[GlobalState]:
    """States visited by following `picks` as indices into the legal moves."""
    states = [initial_state()]
    for pick in picks:
        moves = enumerate_legal_moves(states[-1])
        if not moves:
            break
        board_id, cell_id = moves[pick % len(moves)]
        states.append(apply_move(states[-1], board_id, cell_id))
    return states


def expected_legal(state: GlobalState, board_id: int, cell_id: int) -> bool:
    return (
        not state.outcome.is_terminal
        and not state.boards[board_id].complete
        and state.boards[board_id].cells[cell_id] is Mark.EMPTY
        and (state.next_board is None or state.next_board == board_id)
    )


@settings(max_examples=60, deadline=None)
@given(choices)
def test_legality_is_exactly_the_conjunction(picks: list[int]):
    for state in walk(picks):
        for i in range(BOARD_CELLS):
            for j in range(BOARD_CELLS):
                assert is_valid_move(state, i, j) == expected_legal(state, i, j)


@settings(max_examples=60, deadline=None)
@given(choices)
def test_step_invariants(picks: list[int]):
    states = walk(picks)
    for before, after in zip(states, states[1:]):
        # recover the move that was played
        (board_id, cell_id), = [
            (i, j)
            for i in range(BOARD_CELLS)
            for j in range(BOARD_CELLS)
            if before.boards[i].cells[j] != after.boards[i].cells[j]
        ]
        assert after.boards[board_id].cells[cell_id] is before.current_player

        # routing
        expected_next = None if after.boards[cell_id].complete else cell_id
        assert after.next_board == expected_next

        # alternation, unless the move ended the game
        if after.outcome.is_terminal:
            assert after.current_player is before.current_player
        else:
            assert after.current_player is before.current_player.opponent

        assert after.outcome == check_global_outcome(after)


@settings(max_examples=60, deadline=None)
@given(choices)
def test_board_invariants_hold_everywhere(picks: list[int]):
    for state in walk(picks):
        for board in state.boards:
            if board.winner is not Mark.EMPTY:
                assert board.complete
        if state.outcome.status == "won":
            assert state.outcome.winner is state.current_player
        if state.outcome.is_terminal:
            assert enumerate_legal_moves(state) == []
        assert GlobalState.from_dict(state.to_dict()) == state


@settings(max_examples=40, deadline=None)
@given(choices, st.integers(0, 8), st.integers(0, 8))
def test_illegal_moves_leave_state_untouched(picks: list[int], board_id: int, cell_id: int):
    state = walk(picks)[-1]
    if is_valid_move(state, board_id, cell_id):
        return
    snapshot = state.to_dict()
    with pytest.raises(IllegalMoveError):
        apply_move(state, board_id, cell_id)
    assert state.to_dict() == snapshot


@settings(max_examples=40, deadline=None)
@given(choices)
def test_enumeration_is_sorted_and_repeatable(picks: list[int]):
    state = walk(picks)[-1]
    first = enumerate_legal_moves(state)
    second = enumerate_legal_moves(state)
    assert first == second
    assert first is not second
    assert first == sorted(first)
    assert len(set(first)) == len(first)
