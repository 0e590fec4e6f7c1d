"""
Session Controller

Owns one grid per game and orchestrates start, reset and teardown. Sessions
are explicit objects handed to whichever component needs them.
"""

import uuid
from typing import Callable, Dict, List, Optional

from ..models.game import GameState, GameStatus, TERMINAL_STATUSES
from ..models.grid import Grid, copy_board
from ..utils.game_logger import game_logger
from ..utils.scheduler import Scheduler
from .assist_scheduler import AssistScheduler
from .move_processor import MoveProcessor

Listener = Callable[['GameSession'], None]


class GameSession:
    """
    One player's game.

    Every mutation goes through the move processor or undo log, after which
    the assist scheduler re-plans and listeners (publishers, socket pushes)
    are notified.
    """

    def __init__(self,
                 session_id: str,
                 scheduler: Scheduler,
                 generator=None,
                 mode: str = "single",
                 autofill_delay: float = 0.4,
                 assist_enabled: bool = True):
        self.session_id = session_id
        self.scheduler = scheduler
        self.generator = generator
        self.mode = mode
        self.grid = Grid()
        self.processor = MoveProcessor()
        self.undo_log = self.processor.undo_log
        self.assist = AssistScheduler(scheduler, self.apply_move, autofill_delay) if assist_enabled else None
        self.daily_date: Optional[str] = None
        self.room_id: Optional[str] = None
        self.closed = False
        self._listeners: List[Listener] = []

    @property
    def status(self) -> GameStatus:
        return self.grid.status

    def start(self, difficulty: str, date_str: Optional[str] = None) -> bool:
        """
        Generate a puzzle and begin play.

        Args:
            difficulty: Requested difficulty
            date_str: YYYY-MM-DD for the seeded daily challenge

        Returns:
            bool: False if generation failed; the session is left as it was
        """
        if self.closed or self.generator is None:
            return False
        try:
            if date_str:
                data = self.generator.generate_seeded(date_str, difficulty)
            else:
                data = self.generator.generate(difficulty)
            self.grid.load(data['puzzle'], data['solution'], data.get('difficulty', difficulty),
                           self.scheduler.now_ms())
        except Exception as e:
            game_logger.log_error(None, e, 'start_game', self.session_id)
            return False

        self.daily_date = date_str
        game_logger.log_game_event(self.session_id, 'game_started', 'system',
                                   difficulty=self.grid.difficulty, daily_date=date_str,
                                   empty_cells=self.grid.progress)
        self._notify()
        return True

    def load_puzzle(self, puzzle: str, solution: str, difficulty: str) -> bool:
        """Begin play on a puzzle supplied by someone else (a multiplayer room)."""
        if self.closed:
            return False
        try:
            self.grid.load(puzzle, solution, difficulty, self.scheduler.now_ms())
        except ValueError as e:
            game_logger.log_error(None, e, 'load_puzzle', self.session_id)
            return False
        self.daily_date = None
        self._notify()
        return True

    def apply_move(self, row: int, col: int, value: Optional[int]) -> bool:
        if self.closed:
            return False
        changed = self.processor.apply_move(self.grid, row, col, value, self.scheduler.now_ms())
        if changed:
            self._log_if_finished()
            self._notify()
        return changed

    def toggle_note(self, row: int, col: int, digit: int) -> bool:
        if self.closed:
            return False
        changed = self.processor.toggle_note(self.grid, row, col, digit)
        if changed:
            self._notify()
        return changed

    def undo(self) -> bool:
        if self.closed:
            return False
        changed = self.undo_log.undo(self.grid, self.scheduler.now_ms())
        if changed:
            self._log_if_finished()
            self._notify()
        return changed

    def reset_board(self) -> bool:
        """Clear every placement on the current puzzle and restart the clock."""
        if self.closed or self.grid.status == GameStatus.IDLE:
            return False
        self.grid.restore_initial(self.scheduler.now_ms())
        self._notify()
        return True

    def reset_game(self) -> None:
        """Return to idle with a blank grid."""
        if self.closed:
            return
        self.grid.clear()
        self.daily_date = None
        self._notify()

    def set_terminal_status(self, status: GameStatus) -> bool:
        """
        End a still-active game from outside the move processor.

        Only a Playing game can be ended; a finished game never changes.
        """
        if self.closed or status not in TERMINAL_STATUSES or self.grid.status != GameStatus.PLAYING:
            return False
        self.grid.status = status
        self.grid.end_time = self.scheduler.now_ms()
        self._log_if_finished()
        self._notify()
        return True

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def teardown(self) -> None:
        """Cancel every pending timer; the session ignores all later calls."""
        self.closed = True
        if self.assist:
            self.assist.stop()
        self._listeners.clear()

    def elapsed_ms(self) -> int:
        if self.grid.start_time is None:
            return 0
        end = self.grid.end_time if self.grid.end_time is not None else self.scheduler.now_ms()
        return max(0, end - self.grid.start_time)

    def get_state(self) -> GameState:
        grid = self.grid
        return GameState(
            session_id=self.session_id,
            status=grid.status.value,
            difficulty=grid.difficulty,
            board=copy_board(grid.board),
            initial_board=copy_board(grid.initial_board),
            notes=[[cell[:] for cell in row] for row in grid.notes],
            mistakes=grid.mistakes,
            mistake_cells=sorted(grid.mistake_cells),
            progress=grid.progress,
            can_undo=self.undo_log.can_undo(grid),
            start_time=grid.start_time,
            end_time=grid.end_time,
            autofill_target=self.assist.target if self.assist else None,
            daily_date=self.daily_date,
            mode=self.mode,
            room_id=self.room_id,
            solution=grid.solution if grid.is_terminal else None,
        )

    def _log_if_finished(self):
        if self.grid.is_terminal:
            game_logger.log_game_event(
                self.session_id, f"game_{self.grid.status.value}", 'system',
                mistakes=self.grid.mistakes, progress=self.grid.progress,
                elapsed_ms=self.elapsed_ms(), room_id=self.room_id
            )

    def _notify(self):
        if self.assist:
            self.assist.on_state_change(self.grid)
        for listener in list(self._listeners):
            listener(self)


class SessionManager:
    """
    Registry of live sessions by id.
    """

    def __init__(self, scheduler: Scheduler, generator=None, autofill_delay: float = 0.4):
        self.scheduler = scheduler
        self.generator = generator
        self.autofill_delay = autofill_delay
        self.sessions: Dict[str, GameSession] = {}

    def create_session(self, mode: str = "single", session_id: Optional[str] = None) -> GameSession:
        session_id = session_id or str(uuid.uuid4())
        previous = self.sessions.get(session_id)
        if previous:
            previous.teardown()
        session = GameSession(session_id, self.scheduler, self.generator, mode=mode,
                              autofill_delay=self.autofill_delay)
        self.sessions[session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[GameSession]:
        return self.sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        """
        Tear down and forget a session.

        Returns:
            bool: True if the session existed
        """
        session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        session.teardown()
        return True


# Global service instance
_session_manager = None


def get_session_manager() -> Optional[SessionManager]:
    """Get the global session manager instance."""
    return _session_manager


def initialize_session_manager(scheduler: Scheduler, generator=None, autofill_delay: float = 0.4) -> SessionManager:
    """Initialize the global session manager instance."""
    global _session_manager
    _session_manager = SessionManager(scheduler, generator, autofill_delay)
    return _session_manager
