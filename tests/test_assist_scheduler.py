"""Auto-fill of the last few cells."""

from conftest import PUZZLE, SOLUTION, puzzle_with_holes
from sudoku_arena.models.game import GameStatus


def test_inactive_above_threshold(make_session, scheduler):
    session = make_session(PUZZLE, 'easy', assist=True)
    assert session.assist.target is None
    assert scheduler.pending == []


def test_fills_remaining_cells_in_row_major_order(make_session, scheduler):
    session = make_session(puzzle_with_holes(5), 'easy', assist=True)
    assert session.assist.target == (0, 0)

    scheduler.advance(0.39)
    assert session.grid.board[0][0] is None

    scheduler.advance(0.01)
    assert session.grid.board[0][0] == 5
    assert session.assist.target == (0, 1)

    scheduler.advance(0.4 * 4)
    assert session.status == GameStatus.WON
    assert ''.join(str(v) for row in session.grid.board for v in row) == SOLUTION
    assert session.assist.target is None


def test_player_move_redirects_next_target(make_session, scheduler):
    session = make_session(puzzle_with_holes(5), 'easy', assist=True)
    scheduler.advance(0.2)
    session.apply_move(0, 0, 5)

    assert session.assist.target == (0, 1)
    # The restarted delay counts from the player's move
    scheduler.advance(0.3)
    assert session.grid.board[0][1] is None
    scheduler.advance(0.1)
    assert session.grid.board[0][1] == 3


def test_threshold_scales_with_difficulty(make_session):
    assert make_session(puzzle_with_holes(6), 'hard', assist=True).assist.target is None
    assert make_session(puzzle_with_holes(5), 'hard', assist=True).assist.target == (0, 0)
    assert make_session(puzzle_with_holes(8), 'medium', assist=True).assist.target == (0, 0)
    assert make_session(puzzle_with_holes(9), 'medium', assist=True).assist.target is None


def test_teardown_cancels_pending_fill(make_session, scheduler):
    session = make_session(puzzle_with_holes(3), 'easy', assist=True)
    session.teardown()

    scheduler.advance(5)

    assert session.grid.board[0][0] is None
    assert session.grid.progress == 3


def test_no_fill_after_game_lost(make_session, scheduler):
    session = make_session(puzzle_with_holes(4), 'easy', assist=True)
    session.set_terminal_status(GameStatus.LOST)

    scheduler.advance(5)

    assert session.grid.progress == 4
    assert session.assist.target is None
