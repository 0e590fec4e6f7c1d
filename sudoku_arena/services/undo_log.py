"""
Undo Log

Linear history of grid mutations allowing single-step reversal.
"""

from typing import Optional

from ..models.game import GameStatus, HistoryEntry
from ..models.grid import Grid


class UndoLog:
    """
    Records and reverses move processor effects on a grid's history.

    Undo never gives back a lost life: the mistake counter is a lifetime
    penalty tally, only the live mistake display is cleared.
    """

    def record(self, grid: Grid, row: int, col: int, previous_value: Optional[int]) -> None:
        grid.history.append(HistoryEntry(row, col, previous_value))

    def can_undo(self, grid: Grid) -> bool:
        return grid.status == GameStatus.PLAYING and bool(grid.history)

    def undo(self, grid: Grid, now_ms: int) -> bool:
        """
        Revert the most recent mutation.

        Returns:
            bool: True if a move was reverted
        """
        if not self.can_undo(grid):
            return False

        entry = grid.history.pop()
        current_value = grid.board[entry.row][entry.col]

        # Mirror the move processor's progress accounting in reverse
        if current_value is not None and entry.previous_value is None:
            grid.progress += 1
        elif current_value is None and entry.previous_value is not None:
            grid.progress -= 1

        grid.board[entry.row][entry.col] = entry.previous_value
        grid.mistake_cells.discard((entry.row, entry.col))

        # Restoring the last blank of a clean grid completes it
        if grid.progress == 0 and not grid.mistake_cells:
            grid.status = GameStatus.WON
            grid.end_time = now_ms

        return True
