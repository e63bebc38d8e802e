"""Board rules for a 3x3 grid.

Boards are plain lists of 9 cells, each ``None`` or a mark. Nothing here
touches sessions or the transport.
"""

from typing import List, NamedTuple, Optional, Sequence

from .errors import InvalidMove

X = 'X'
O = 'O'
MARKS = (X, O)
BOARD_SIZE = 9

WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)

Board = List[Optional[str]]


class Outcome(NamedTuple):
    winner: Optional[str] = None
    is_draw: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.winner is not None or self.is_draw


UNDECIDED = Outcome()


def empty_board() -> Board:
    return [None] * BOARD_SIZE


def other_mark(mark: str) -> str:
    return O if mark == X else X


def mark_for_index(index: int) -> str:
    """Player order decides the mark: first player is X, second is O."""
    return X if index == 0 else O


def is_valid_position(position) -> bool:
    # bool is an int subclass; True/False are not positions
    return isinstance(position, int) and not isinstance(position, bool) and 0 <= position < BOARD_SIZE


def apply_mark(board: Sequence[Optional[str]], position, mark: str) -> Board:
    """Return a copy of ``board`` with ``mark`` written at ``position``.

    Raises InvalidMove if the position is out of range or already marked.
    """
    if not is_valid_position(position):
        raise InvalidMove('invalid position')
    if board[position] is not None:
        raise InvalidMove('cell taken')
    updated = list(board)
    updated[position] = mark
    return updated


def evaluate(board: Sequence[Optional[str]]) -> Outcome:
    """Check the 8 winning lines, then whether the board is full."""
    for a, b, c in WIN_LINES:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return Outcome(winner=board[a])
    if all(cell is not None for cell in board):
        return Outcome(is_draw=True)
    return UNDECIDED
