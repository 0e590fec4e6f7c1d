"""
Assist Scheduler

Once a player is close to finishing, auto-places correct digits one at a
time. Each state change restarts the scan from the top of the grid, so a
player's own move redirects the next auto-fill target.
"""

from typing import Callable, Dict, Optional, Tuple

from ..config.game_settings import AUTOFILL_THRESHOLDS
from ..models.game import GameStatus
from ..models.grid import Grid
from ..utils.scheduler import Scheduler, TimerHandle, cancel_timer


class AssistScheduler:
    """
    Timed, cancellable auto-completion of the last few cells.

    `target` is the cell about to be filled, exposed so clients can show a cue.
    """

    def __init__(self,
                 scheduler: Scheduler,
                 fill: Callable[[int, int, int], bool],
                 delay: float = 0.4,
                 thresholds: Optional[Dict[str, int]] = None):
        self.scheduler = scheduler
        self.fill = fill
        self.delay = delay
        self.thresholds = thresholds or AUTOFILL_THRESHOLDS
        self.target: Optional[Tuple[int, int]] = None
        self._pending: Optional[TimerHandle] = None
        self._stopped = False

    def threshold_for(self, difficulty: str) -> int:
        return self.thresholds.get(difficulty, self.thresholds['medium'])

    def is_active(self, grid: Grid) -> bool:
        has_work = grid.progress > 0 or bool(grid.mistake_cells)
        return (grid.status == GameStatus.PLAYING
                and has_work
                and grid.progress <= self.threshold_for(grid.difficulty))

    def on_state_change(self, grid: Grid) -> None:
        """Re-plan the next auto-fill from scratch."""
        self.cancel()
        if self._stopped or not self.is_active(grid):
            return

        cell = grid.first_empty_cell()
        if cell is None:
            return

        row, col = cell
        digit = grid.solution_digit(row, col)
        self.target = cell
        self._pending = self.scheduler.call_later(self.delay, lambda: self._fire(row, col, digit))

    def _fire(self, row: int, col: int, digit: int):
        self._pending = None
        self.target = None
        if self._stopped:
            return
        self.fill(row, col, digit)

    def cancel(self) -> None:
        cancel_timer(self._pending)
        self._pending = None
        self.target = None

    def stop(self) -> None:
        """Permanently disable; used on session teardown."""
        self._stopped = True
        self.cancel()
