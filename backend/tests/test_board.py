import itertools
import pytest

from tictactoe.services.games import board as rules
from tictactoe.services.games.board import O, X, Outcome, apply_mark, evaluate
from tictactoe.services.games.errors import InvalidMove, ValidationError


def _uniform_marks(cells):
    return {cells[a] for a, b, c in rules.WIN_LINES if cells[a] is not None and cells[a] == cells[b] == cells[c]}


def test_evaluate_every_board():
    # All 3^9 grids, including ones unreachable in play
    for cells in itertools.product((None,) + rules.MARKS, repeat=9):
        outcome = evaluate(list(cells))
        winners = _uniform_marks(cells)
        if winners:
            assert outcome.winner in winners
            assert not outcome.is_draw
        elif all(c is not None for c in cells):
            assert outcome == Outcome(is_draw=True)
        else:
            assert outcome == rules.UNDECIDED
            assert not outcome.is_terminal


def test_evaluate_lines():
    assert evaluate([X, X, X, None, O, O, None, None, None]).winner == X
    assert evaluate([O, X, None, O, X, None, O, None, None]).winner == O
    assert evaluate([X, O, None, O, X, None, None, None, X]).winner == X
    assert evaluate([None, None, O, X, O, None, O, X, X]).winner == O


def test_full_board_without_line_is_draw():
    outcome = evaluate([X, O, X, X, O, O, O, X, X])
    assert outcome.is_draw
    assert outcome.winner is None
    assert outcome.is_terminal


def test_win_on_last_cell_is_not_draw():
    outcome = evaluate([X, O, X, O, X, O, O, X, X])
    assert outcome.winner == X
    assert not outcome.is_draw


def test_apply_mark_returns_updated_copy():
    grid = rules.empty_board()
    updated = apply_mark(grid, 4, X)
    assert updated[4] == X
    assert [c for i, c in enumerate(updated) if i != 4] == [None] * 8
    # Input untouched
    assert grid == [None] * 9


def test_apply_mark_rejects_occupied_cell():
    grid = apply_mark(rules.empty_board(), 0, X)
    with pytest.raises(InvalidMove):
        apply_mark(grid, 0, O)
    assert grid[0] == X


@pytest.mark.parametrize('position', [-1, 9, 100, None, '4', 4.0, True])
def test_apply_mark_rejects_bad_positions(position):
    with pytest.raises(ValidationError):
        apply_mark(rules.empty_board(), position, X)


def test_marks_by_player_index():
    assert rules.mark_for_index(0) == X
    assert rules.mark_for_index(1) == O
    assert rules.other_mark(X) == O
    assert rules.other_mark(O) == X
