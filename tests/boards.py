"""Board builders shared by the test modules."""

from uttt.game import GlobalState, LocalBoard, Mark, Outcome

X = Mark.PLAYER_0
O = Mark.PLAYER_1
E = Mark.EMPTY

# Full board with no three in a row
DRAWN_CELLS = (X, O, X, X, O, O, O, X, X)


def won_board(mark: Mark) -> LocalBoard:
    return LocalBoard(cells=(mark,) * 3 + (E,) * 6, complete=True, winner=mark)


def drawn_board() -> LocalBoard:
    return LocalBoard(cells=DRAWN_CELLS, complete=True, winner=E)


def almost_drawn_board() -> LocalBoard:
    """DRAWN_CELLS with cell 8 still open; X marking it draws the board."""
    return LocalBoard(cells=DRAWN_CELLS[:8] + (E,))


def make_state(boards: dict[int, LocalBoard] | None = None, **kwargs) -> GlobalState:
    all_boards = [LocalBoard()] * 9
    for i, b in (boards or {}).items():
        all_boards[i] = b
    return GlobalState(boards=tuple(all_boards), **kwargs)




def won_game(mark: Mark) -> GlobalState:
    """`mark` holds the top row of the meta-grid."""
    return make_state(
        {0: won_board(mark), 1: won_board(mark), 2: won_board(mark)},
        current_player=mark,
        outcome=Outcome.won(mark),
    )


def drawn_game() -> GlobalState:
    return make_state({i: drawn_board() for i in range(9)}, outcome=Outcome.draw())
