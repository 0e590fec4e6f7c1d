"""
Move Processor

Validates and applies single moves to a grid, deriving mistake, progress and
status transitions.
"""

from typing import Optional

from ..config.game_settings import MAX_MISTAKES
from ..models.game import GameStatus
from ..models.grid import Grid, in_bounds
from .undo_log import UndoLog


def _is_digit(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 9


class MoveProcessor:
    """
    Applies placements, clears and note toggles.

    Illegal requests (given cells, finished games, unchanged values, bad
    coordinates) are normal UI traffic and are ignored rather than raised.
    """

    def __init__(self, undo_log: Optional[UndoLog] = None):
        self.undo_log = undo_log or UndoLog()

    def apply_move(self, grid: Grid, row: int, col: int, value: Optional[int], now_ms: int) -> bool:
        """
        Place `value` (or clear the cell when None) at (row, col).

        Args:
            grid: Grid to mutate
            row: Row index 0-8
            col: Column index 0-8
            value: Digit 1-9 or None to clear
            now_ms: Current time, recorded when the game ends

        Returns:
            bool: True if the grid changed
        """
        if grid.status != GameStatus.PLAYING:
            return False
        if not in_bounds(row, col) or (value is not None and not _is_digit(value)):
            return False
        if grid.is_given(row, col):
            return False

        current_value = grid.board[row][col]
        if current_value == value:
            return False

        if current_value is None and value is not None:
            grid.progress -= 1
        elif current_value is not None and value is None:
            grid.progress += 1

        cell = (row, col)
        if value is None:
            grid.mistake_cells.discard(cell)
        elif value != grid.solution_digit(row, col):
            grid.mistakes += 1
            grid.mistake_cells.add(cell)
        else:
            # A corrected cell leaves the live set; the lifetime tally stays
            grid.mistake_cells.discard(cell)

        self.undo_log.record(grid, row, col, current_value)
        grid.board[row][col] = value
        if value is not None:
            grid.notes[row][col] = []

        grid.status = self.evaluate_status(grid)
        if grid.is_terminal:
            grid.end_time = now_ms
        return True

    def evaluate_status(self, grid: Grid) -> GameStatus:
        """Derive the status after a mutation."""
        if grid.mistakes >= MAX_MISTAKES:
            return GameStatus.LOST
        if grid.progress == 0:
            # A full grid still showing a wrong digit is a loss, not a win
            return GameStatus.WON if not grid.mistake_cells else GameStatus.LOST
        return grid.status

    def toggle_note(self, grid: Grid, row: int, col: int, digit: int) -> bool:
        """
        Add or remove a candidate digit on an empty, non-given cell.

        Returns:
            bool: True if the notes changed
        """
        if grid.status != GameStatus.PLAYING:
            return False
        if not in_bounds(row, col) or not _is_digit(digit):
            return False
        if grid.is_given(row, col) or grid.board[row][col] is not None:
            return False

        notes = grid.notes[row][col]
        if digit in notes:
            notes.remove(digit)
        else:
            notes.append(digit)
            notes.sort()
        return True
