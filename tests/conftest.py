"""Pytest configuration and fixtures."""

import heapq
import itertools
import os
import tempfile

# Keep test logs out of the working tree; set before the logger is imported
os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='sudoku_arena_logs_'))

import pytest

from sudoku_arena import create_app
from sudoku_arena.config import TestingConfig
from sudoku_arena.services import initialize_services
from sudoku_arena.services.session_controller import GameSession
from sudoku_arena.storage import MemoryStore
from sudoku_arena.utils.scheduler import Scheduler, TimerHandle

SOLUTION = "534678912672195348198342567859761423426853791713924856961537284287419635345286179"
PUZZLE = "53--7----6--195----98----6-8---6---34--8-3--17---2---6-6----28----419--5----8--79"


def puzzle_with_holes(count):
    """The fixture solution with its first `count` cells blanked."""
    return '-' * count + SOLUTION[count:]


def wrong_digit(row, col):
    """Any digit that is not the solution for (row, col)."""
    correct = int(SOLUTION[row * 9 + col])
    return 1 if correct != 1 else 2


# Float slack so advance(0.39) + advance(0.01) reaches a 0.4s timer
EPSILON = 1e-6


class ManualScheduler(Scheduler):
    """Scheduler driven by the test: time only moves in `advance`."""

    def __init__(self, start: float = 1_700_000_000.0):
        super().__init__()
        self.clock = start
        self._queue = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self.clock

    def call_later(self, delay, callback) -> TimerHandle:
        handle = TimerHandle()
        heapq.heappush(self._queue, (self.clock + max(delay, 0.0), next(self._seq), handle, callback))
        return handle

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running every callback that falls due in order."""
        target = self.clock + seconds
        with self.lock:
            while self._queue and self._queue[0][0] <= target + EPSILON:
                due, _, handle, callback = heapq.heappop(self._queue)
                self.clock = max(self.clock, due)
                if handle.cancelled:
                    continue
                handle.fired = True
                callback()
            self.clock = target

    @property
    def pending(self):
        return [entry[2] for entry in self._queue if entry[2].pending]


class FixedGenerator:
    """Generator stand-in that always returns the same puzzle."""

    def __init__(self, puzzle: str = PUZZLE, solution: str = SOLUTION):
        self.puzzle = puzzle
        self.solution = solution
        self.calls = 0

    def generate(self, difficulty):
        self.calls += 1
        return {'puzzle': self.puzzle, 'solution': self.solution, 'difficulty': difficulty}

    def generate_seeded(self, seed, difficulty):
        return self.generate(difficulty)


@pytest.fixture
def scheduler():
    """Manual-clock scheduler."""
    return ManualScheduler()


@pytest.fixture
def generator():
    """Generator returning the fixture puzzle."""
    return FixedGenerator()


@pytest.fixture
def store():
    """Fresh in-process shared store."""
    return MemoryStore()


@pytest.fixture
def make_session(scheduler, generator):
    """Factory for sessions bound to the manual scheduler.

    Returns:
        Callable taking optional puzzle, difficulty and assist flag, returning a Playing session.
    """
    counter = itertools.count()

    def factory(puzzle=PUZZLE, difficulty='medium', assist=False, mode='single'):
        session = GameSession(f"session-{next(counter)}", scheduler, generator,
                              mode=mode, assist_enabled=assist)
        if puzzle is not None:
            assert session.load_puzzle(puzzle, SOLUTION, difficulty)
        return session

    return factory


@pytest.fixture
def test_config(tmp_path):
    """Testing configuration writing preferences under a temporary directory."""

    class Config(TestingConfig):
        PREFERENCES_FILE = str(tmp_path / 'preferences.json')
        JWT_SECRET = 'test-jwt-secret-with-enough-length-for-hs256'

    return Config


@pytest.fixture
def services(test_config, scheduler, store, generator):
    """Every global service wired to the test doubles."""
    return initialize_services(test_config, scheduler=scheduler, store=store, generator=generator)


@pytest.fixture
def app_and_socketio(test_config, services):
    """Flask application and SocketIO server."""
    app, socketio = create_app(test_config)
    return app, socketio


@pytest.fixture
def client(app_and_socketio):
    """Flask HTTP test client."""
    app, _ = app_and_socketio
    return app.test_client()


@pytest.fixture
def register(client):
    """Register a player over HTTP and return (token, player)."""

    def do_register(name='Alice'):
        response = client.post('/api/players', json={'name': name})
        assert response.status_code == 201
        body = response.get_json()
        return body['token'], body['player']

    return do_register
